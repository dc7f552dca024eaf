from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.orm import selectinload

from taskboard.core.exceptions import TransactionFailure
from taskboard.db.base import utcnow
from taskboard.logs import debug_logger
from taskboard.models.board import Board
from taskboard.models.column import Column
from taskboard.models.task import Task
from taskboard.services.locks import owner_locks
from taskboard.services.move_service import MoveService


class BoardService:
    """CRUD operations service for Board model"""

    @staticmethod
    async def create(
        db: AsyncSession,
        name: str,
        owner_id: int,
        description: Optional[str] = None
    ) -> Board:
        """Create a new empty board at the end of the owner's boards"""
        async with owner_locks.hold(owner_id):
            count = await BoardService.count_by_owner(db, owner_id)
            board = Board(
                name=name,
                description=description,
                owner_id=owner_id,
                position=count
            )
            db.add(board)
            await db.commit()
            await db.refresh(board)

        debug_logger.info(f"Создана доска {board.id} для пользователя {owner_id}")
        return board

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        board_id: int,
        load_relations: bool = False
    ) -> Optional[Board]:
        """Get board by id, optionally with its ordered columns and tasks"""
        query = select(Board).where(Board.id == board_id)

        if load_relations:
            query = query.options(
                selectinload(Board.columns).selectinload(Column.tasks)
            ).execution_options(populate_existing=True)

        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_boards_by_owner(
        db: AsyncSession,
        owner_id: int,
        skip: int = 0,
        limit: int = 100
    ) -> List[Board]:
        """Get boards owned by a user in the user's board order"""
        query = (
            select(Board)
            .where(Board.owner_id == owner_id)
            .order_by(Board.position, Board.id)
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def count_by_owner(db: AsyncSession, owner_id: int) -> int:
        result = await db.execute(select(func.count(Board.id)).where(Board.owner_id == owner_id))
        return result.scalar() or 0

    @staticmethod
    async def delete(
        db: AsyncSession,
        board_id: int
    ) -> bool:
        """Delete a board together with its columns and their tasks.

        The owner's remaining boards are renumbered in the same commit.
        """
        owner_id = (await db.execute(select(Board.owner_id).where(Board.id == board_id))).scalar()
        if owner_id is None:
            return False

        async with owner_locks.hold(owner_id):
            try:
                column_ids = select(Column.id).where(Column.board_id == board_id)
                await db.execute(delete(Task).where(Task.column_id.in_(column_ids)))
                await db.execute(delete(Column).where(Column.board_id == board_id))
                result = await db.execute(delete(Board).where(Board.id == board_id))

                remaining = await MoveService._board_ids(db, owner_id)
                await MoveService._write_board_order(db, owner_id, remaining, utcnow())
                await db.commit()
            except Exception as e:
                await db.rollback()
                debug_logger.error(f"Ошибка при удалении доски {board_id}: {e}")
                raise TransactionFailure("Failed to delete board") from e

        debug_logger.info(f"Доска {board_id} удалена")
        return result.rowcount > 0
