from taskboard.db.database import engine, async_session_factory, get_async_session, init_db

__all__ = ["engine", "async_session_factory", "get_async_session", "init_db"]
