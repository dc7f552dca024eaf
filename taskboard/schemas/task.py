from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from taskboard.models.task import TaskPriority


class Label(BaseModel):
    name: str
    color: str = "#3498db"


class Subtask(BaseModel):
    title: str
    completed: bool = False


class TaskBase(BaseModel):
    """Base schema for task data"""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    labels: List[Label] = []
    subtasks: List[Subtask] = []
    due_date: Optional[datetime] = None

    @field_validator('due_date', mode='before')
    @classmethod
    def parse_due_date(cls, value):
        if isinstance(value, str) and value.endswith('Z'):
            # 'Z' -> '+00:00', в базе храним naive UTC
            return datetime.fromisoformat(value.replace('Z', '+00:00')).replace(tzinfo=None)
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value


class TaskCreate(TaskBase):
    """Schema for task creation, the task is appended to the column"""
    pass


class TaskUpdate(BaseModel):
    """Schema for task update, position and column are changed only through moves"""
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    labels: Optional[List[Label]] = None
    subtasks: Optional[List[Subtask]] = None
    due_date: Optional[datetime] = None


class TaskResponse(TaskBase):
    """Schema for task response"""
    id: int
    column_id: int
    position: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
