from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskboard.schemas.task import TaskResponse


class ColumnBase(BaseModel):
    """Base schema for column data"""
    title: str = Field(min_length=1)
    color: Optional[str] = None
    wip_limit: Optional[int] = Field(default=None, ge=0)


class ColumnCreate(ColumnBase):
    """Schema for column creation, the column is appended to the board"""
    pass


class ColumnResponse(ColumnBase):
    """Schema for column response with its ordered tasks"""
    id: int
    board_id: int
    position: int
    created_at: datetime
    updated_at: datetime
    tasks: List[TaskResponse] = []

    class Config:
        from_attributes = True
