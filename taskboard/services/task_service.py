from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func

from taskboard.core.exceptions import TransactionFailure
from taskboard.db.base import utcnow
from taskboard.logs import debug_logger, log_function
from taskboard.models.task import Task, TaskPriority
from taskboard.services.locks import board_locks
from taskboard.services.move_service import MoveService


class TaskService:
    """CRUD operations service for Task model.

    Order changes go through MoveService, this service only appends and removes.
    """

    @staticmethod
    @log_function()
    async def create(
        db: AsyncSession,
        board_id: int,
        column_id: int,
        title: str,
        description: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        labels: Optional[List[Dict[str, Any]]] = None,
        subtasks: Optional[List[Dict[str, Any]]] = None,
        due_date: Optional[datetime] = None
    ) -> Task:
        """Append a new task at the end of the column"""
        async with board_locks.hold(board_id):
            query = select(func.count(Task.id)).where(Task.column_id == column_id)
            count = (await db.execute(query)).scalar() or 0

            task = Task(
                title=title,
                description=description,
                column_id=column_id,
                position=count,
                priority=priority,
                labels=labels or [],
                subtasks=subtasks or [],
                due_date=due_date
            )
            db.add(task)
            await db.commit()
            await db.refresh(task)

        debug_logger.info(f"Создана задача {task.id} в колонке {column_id}, позиция {count}")
        return task

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        task_id: int
    ) -> Optional[Task]:
        query = select(Task).where(Task.id == task_id)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def get_by_column_id(
        db: AsyncSession,
        column_id: int
    ) -> List[Task]:
        """Get all tasks of a column in column order"""
        query = select(Task).where(Task.column_id == column_id).order_by(Task.position, Task.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        task_id: int,
        **fields: Any
    ) -> Optional[Task]:
        """Update content fields of a task; None values are left untouched"""
        update_data = {key: value for key, value in fields.items() if value is not None}
        if update_data:
            update_data["updated_at"] = utcnow()
            debug_logger.debug(f"Обновляемые поля задачи {task_id}: {update_data}")
            stmt = update(Task).where(Task.id == task_id).values(**update_data)
            await db.execute(stmt)
            await db.commit()

        query = select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def delete(
        db: AsyncSession,
        task: Task,
        board_id: int
    ) -> bool:
        """Delete a task and close the gap in its column's positions"""
        task_id, column_id = task.id, task.column_id
        async with board_locks.hold(board_id):
            try:
                result = await db.execute(delete(Task).where(Task.id == task_id))
                remaining = await MoveService._task_ids(db, column_id)
                now = utcnow()
                await MoveService._write_task_order(db, column_id, remaining, now)
                await MoveService._stamp_columns(db, [column_id], now)
                await MoveService._stamp_board(db, board_id, now)
                await db.commit()
            except Exception as e:
                await db.rollback()
                debug_logger.error(f"Ошибка при удалении задачи {task_id}: {e}")
                raise TransactionFailure("Failed to delete task") from e

        debug_logger.info(f"Задача {task_id} удалена из колонки {column_id}")
        return result.rowcount > 0
