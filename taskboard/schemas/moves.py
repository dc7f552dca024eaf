from typing import List
from pydantic import BaseModel, Field, field_validator


def _ensure_unique(value: List[int]) -> List[int]:
    if len(set(value)) != len(value):
        raise ValueError("identifiers must be unique")
    return value


class BoardOrderUpdate(BaseModel):
    """Full new order of the caller's boards"""
    board_ids: List[int]

    @field_validator('board_ids')
    @classmethod
    def unique_board_ids(cls, value):
        return _ensure_unique(value)


class ColumnOrderUpdate(BaseModel):
    """Full new column order of a board"""
    column_ids: List[int]

    @field_validator('column_ids')
    @classmethod
    def unique_column_ids(cls, value):
        return _ensure_unique(value)


class TaskOrderUpdate(BaseModel):
    """Full new task order of a column"""
    task_ids: List[int]

    @field_validator('task_ids')
    @classmethod
    def unique_task_ids(cls, value):
        return _ensure_unique(value)


class TaskMove(BaseModel):
    """Move of a single task, possibly across columns"""
    source_column_id: int
    destination_column_id: int
    destination_index: int = Field(ge=0)


class MoveResult(BaseModel):
    success: bool = True


class ColumnMove(BaseModel):
    """Move of a single column within its board"""
    destination_index: int = Field(ge=0)
