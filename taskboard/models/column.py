from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from taskboard.db.base import Base, utcnow


class Column(Base):
    """Board column, the container of tasks"""
    
    __tablename__ = "columns"
    __table_args__ = (
        Index("ix_columns_board_position", "board_id", "position"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # dense, 0..n-1 within the board
    color = Column(String, nullable=True)
    wip_limit = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    
    board = relationship("Board", back_populates="columns")
    
    tasks = relationship(
        "Task",
        back_populates="column",
        order_by="Task.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
