from sqlalchemy import Column, Integer, String, DateTime

from taskboard.db.base import Base, utcnow


class User(Base):
    """Board owner identity"""
    
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
