from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskboard.schemas.column import ColumnResponse


class BoardBase(BaseModel):
    """Base schema for board data"""
    name: str = Field(min_length=1)
    description: Optional[str] = None


class BoardCreate(BoardBase):
    """Schema for board creation"""
    pass


class BoardInDB(BoardBase):
    """Schema for board representation without columns"""
    id: int
    owner_id: int
    position: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BoardList(BaseModel):
    """Schema for list of boards"""
    boards: List[BoardInDB]
    total: int = 0


class BoardCompleteResponse(BoardInDB):
    """Schema for complete board response with columns and their tasks"""
    columns: List[ColumnResponse] = []
