import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, JSON, Index
from sqlalchemy.orm import relationship

from taskboard.db.base import Base, utcnow


class TaskPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Task(Base):
    """Task card inside a column"""
    
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_column_position", "column_id", "position"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    column_id = Column(Integer, ForeignKey("columns.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # dense, 0..n-1 within the column
    priority = Column(Enum(TaskPriority), nullable=False, default=TaskPriority.MEDIUM)
    labels = Column(JSON, nullable=False, default=list)  # [{"name": ..., "color": ...}]
    subtasks = Column(JSON, nullable=False, default=list)  # [{"title": ..., "completed": ...}]
    due_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    
    column = relationship("Column", back_populates="tasks")
