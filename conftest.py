import os
import tempfile
from datetime import datetime

# Настройки до импорта taskboard: логи во временную папку, движок приложения на sqlite
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="taskboard-logs-"))
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from taskboard.db.models import Base, User, Board, Column, Task

OLD_STAMP = datetime(2020, 1, 1)


@pytest_asyncio.fixture
async def engine(tmp_path):
    # Файл, а не :memory: - у каждой сессии свое соединение, как с настоящей БД
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Owner with one board: column A [T1, T2, T3], column B [T4, T5], column C [].

    A second user owns a separate board with one column and one task.
    """
    async with session_factory() as session:
        owner = User(username="owner")
        stranger = User(username="stranger")
        session.add_all([owner, stranger])
        await session.flush()

        board = Board(name="Sprint", owner_id=owner.id, updated_at=OLD_STAMP)
        foreign_board = Board(name="Other", owner_id=stranger.id, updated_at=OLD_STAMP)
        session.add_all([board, foreign_board])
        await session.flush()

        col_a = Column(title="A", board_id=board.id, position=0, updated_at=OLD_STAMP)
        col_b = Column(title="B", board_id=board.id, position=1, updated_at=OLD_STAMP)
        col_c = Column(title="C", board_id=board.id, position=2, updated_at=OLD_STAMP)
        foreign_col = Column(title="X", board_id=foreign_board.id, position=0, updated_at=OLD_STAMP)
        session.add_all([col_a, col_b, col_c, foreign_col])
        await session.flush()

        tasks = {}
        for column, titles in ((col_a, ["T1", "T2", "T3"]), (col_b, ["T4", "T5"]), (foreign_col, ["X1"])):
            for position, title in enumerate(titles):
                task = Task(title=title, column_id=column.id, position=position, updated_at=OLD_STAMP)
                session.add(task)
                tasks[title] = task
        await session.commit()

        return {
            "owner": owner.id,
            "stranger": stranger.id,
            "board": board.id,
            "foreign_board": foreign_board.id,
            "A": col_a.id,
            "B": col_b.id,
            "C": col_c.id,
            "X": foreign_col.id,
            **{title: task.id for title, task in tasks.items()},
        }


async def snapshot(session_factory):
    """Every row that ordering touches, read through a fresh session"""
    async with session_factory() as session:
        boards = (await session.execute(
            select(Board.id, Board.updated_at).order_by(Board.id)
        )).all()
        columns = (await session.execute(
            select(Column.id, Column.board_id, Column.position, Column.updated_at).order_by(Column.id)
        )).all()
        tasks = (await session.execute(
            select(Task.id, Task.column_id, Task.position, Task.updated_at).order_by(Task.id)
        )).all()
    return [tuple(row) for row in boards], [tuple(row) for row in columns], [tuple(row) for row in tasks]


async def titles_in(session_factory, column_id):
    async with session_factory() as session:
        rows = await session.execute(
            select(Task.title, Task.position).where(Task.column_id == column_id).order_by(Task.position)
        )
        return [tuple(row) for row in rows.all()]


async def column_titles(session_factory, board_id):
    async with session_factory() as session:
        rows = await session.execute(
            select(Column.title, Column.position).where(Column.board_id == board_id).order_by(Column.position)
        )
        return [tuple(row) for row in rows.all()]


async def board_names(session_factory, owner_id):
    async with session_factory() as session:
        rows = await session.execute(
            select(Board.name, Board.position).where(Board.owner_id == owner_id).order_by(Board.position)
        )
        return [tuple(row) for row in rows.all()]
