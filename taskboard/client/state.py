from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class TaskState(BaseModel):
    """Client copy of a task; unknown payload fields are kept as-is"""
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    title: str
    column_id: int
    position: int = 0


class ColumnState(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    title: str
    board_id: int
    position: int = 0
    tasks: List[TaskState] = []


class BoardState(BaseModel):
    """Immutable in-memory board; every update produces a new instance"""
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    name: str
    columns: List[ColumnState] = []

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "BoardState":
        return cls.model_validate(payload)

    def column_index(self, column_id: int) -> Optional[int]:
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index
        return None

    def get_column(self, column_id: int) -> Optional[ColumnState]:
        index = self.column_index(column_id)
        return None if index is None else self.columns[index]

    def replace_columns(self, columns: List[ColumnState]) -> "BoardState":
        return self.model_copy(update={"columns": list(columns)})

    def replace_tasks(self, tasks_by_column: Dict[int, List[TaskState]]) -> "BoardState":
        """New board where the given columns hold the given tasks.

        Each task's ``column_id`` is rewritten to the column that now holds it.
        """
        columns = []
        for column in self.columns:
            if column.id in tasks_by_column:
                tasks = [
                    task if task.column_id == column.id else task.model_copy(update={"column_id": column.id})
                    for task in tasks_by_column[column.id]
                ]
                column = column.model_copy(update={"tasks": tasks})
            columns.append(column)
        return self.replace_columns(columns)

    def column_order(self) -> List[int]:
        return [column.id for column in self.columns]

    def task_order(self, column_id: int) -> List[int]:
        column = self.get_column(column_id)
        return [] if column is None else [task.id for task in column.tasks]
