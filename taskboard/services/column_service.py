from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload

from taskboard.core.exceptions import TransactionFailure
from taskboard.db.base import utcnow
from taskboard.logs import debug_logger
from taskboard.models.column import Column
from taskboard.models.task import Task
from taskboard.services.locks import board_locks
from taskboard.services.move_service import MoveService


class ColumnService:
    """CRUD operations service for Column model"""

    @staticmethod
    async def create(
        db: AsyncSession,
        board_id: int,
        title: str,
        color: Optional[str] = None,
        wip_limit: Optional[int] = None
    ) -> Column:
        """Append a new column at the end of the board"""
        async with board_locks.hold(board_id):
            query = select(func.count(Column.id)).where(Column.board_id == board_id)
            count = (await db.execute(query)).scalar() or 0

            column = Column(
                title=title,
                board_id=board_id,
                position=count,
                color=color,
                wip_limit=wip_limit
            )
            db.add(column)
            await db.commit()

        debug_logger.info(f"Создана колонка {column.id} на доске {board_id}, позиция {count}")
        return await ColumnService.get_by_id(db, column.id, load_tasks=True)

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        column_id: int,
        load_tasks: bool = False
    ) -> Optional[Column]:
        """Get column by id with optional tasks loading"""
        query = select(Column).where(Column.id == column_id)

        if load_tasks:
            query = query.options(selectinload(Column.tasks)).execution_options(populate_existing=True)

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_board_id(
        db: AsyncSession,
        board_id: int,
        load_tasks: bool = False
    ) -> List[Column]:
        """Get all columns of a board in board order"""
        query = select(Column).where(Column.board_id == board_id).order_by(Column.position, Column.id)

        if load_tasks:
            query = query.options(selectinload(Column.tasks)).execution_options(populate_existing=True)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def delete(
        db: AsyncSession,
        column: Column
    ) -> bool:
        """Delete a column with its tasks and close the gap in the board's column positions"""
        column_id, board_id = column.id, column.board_id
        async with board_locks.hold(board_id):
            try:
                await db.execute(delete(Task).where(Task.column_id == column_id))
                result = await db.execute(delete(Column).where(Column.id == column_id))

                remaining = await MoveService._column_ids(db, board_id)
                now = utcnow()
                await MoveService._write_column_order(db, board_id, remaining, now)
                await MoveService._stamp_board(db, board_id, now)
                await db.commit()
            except Exception as e:
                await db.rollback()
                debug_logger.error(f"Ошибка при удалении колонки {column_id}: {e}")
                raise TransactionFailure("Failed to delete column") from e

        debug_logger.info(f"Колонка {column_id} удалена с доски {board_id}")
        return result.rowcount > 0
