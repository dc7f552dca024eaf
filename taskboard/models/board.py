from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from taskboard.db.base import Base, utcnow


class Board(Base):
    """Kanban board, the container of columns"""
    
    __tablename__ = "boards"
    __table_args__ = (
        Index("ix_boards_owner_position", "owner_id", "position"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Порядок досок пользователя, 0..n-1 в пределах owner_id
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    
    owner = relationship("User", backref="owned_boards")
    
    # Порядок колонок определяется полем position
    columns = relationship(
        "Column",
        back_populates="board",
        order_by="Column.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
