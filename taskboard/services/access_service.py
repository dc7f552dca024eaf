from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import AccessDenied, InvalidInput, NotFound
from taskboard.logs import debug_logger
from taskboard.models.board import Board
from taskboard.models.column import Column
from taskboard.models.task import Task


def ensure_identifier(value: Any, name: str) -> int:
    """Reject identifiers that are not positive integers"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInput(f"Malformed {name}")
    return value


class AccessService:
    """Single-owner checks: the caller must own the board that contains the target"""

    @staticmethod
    async def get_owned_board(db: AsyncSession, user_id: int, board_id: int) -> Board:
        ensure_identifier(board_id, "board id")
        board = await db.get(Board, board_id)
        if board is None:
            raise NotFound("Board not found")
        AccessService._check_owner(board, user_id)
        return board

    @staticmethod
    async def get_owned_column(db: AsyncSession, user_id: int, column_id: int) -> Column:
        ensure_identifier(column_id, "column id")
        column = await db.get(Column, column_id)
        if column is None:
            raise NotFound("Column not found")
        await AccessService.get_owned_board(db, user_id, column.board_id)
        return column

    @staticmethod
    async def get_owned_task(db: AsyncSession, user_id: int, task_id: int) -> Task:
        ensure_identifier(task_id, "task id")
        task = await db.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")
        await AccessService.get_owned_column(db, user_id, task.column_id)
        return task

    @staticmethod
    def _check_owner(board: Board, user_id: int) -> None:
        if board.owner_id != user_id:
            debug_logger.warning(f"Пользователь {user_id} не владеет доской {board.id}")
            raise AccessDenied()
