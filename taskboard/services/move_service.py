from typing import Dict, List, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import InvalidInput, NotFound, TaskboardError, TransactionFailure
from taskboard.db.base import utcnow
from taskboard.logs import api_logger, debug_logger, log_function
from taskboard.models.board import Board
from taskboard.models.column import Column
from taskboard.models.task import Task
from taskboard.services.access_service import AccessService, ensure_identifier
from taskboard.services.locks import board_locks, owner_locks
from taskboard.services.reorder import MoveDescriptor, move_between_lists, reorder_within_list

COLUMN_MOVE = "column"
TASK_MOVE = "task"


def _check_permutation(requested: Sequence[int], current: Sequence[int], what: str) -> None:
    if len(requested) != len(current) or set(requested) != set(current):
        raise InvalidInput(f"{what} must list every member of the container exactly once")


class MoveService:
    """Transactional writer for board, column and task reorders and task moves.

    Every public operation validates, derives the new order with the reorder
    engine and writes all touched rows in one commit. Operations on the same
    board are serialized by ``board_locks``; the ``FOR UPDATE`` reads extend
    that to several server processes on PostgreSQL.
    """

    @staticmethod
    async def _board_ids(db: AsyncSession, owner_id: int) -> List[int]:
        query = (
            select(Board.id)
            .where(Board.owner_id == owner_id)
            .order_by(Board.position, Board.id)
            .with_for_update()
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def _column_ids(db: AsyncSession, board_id: int) -> List[int]:
        query = (
            select(Column.id)
            .where(Column.board_id == board_id)
            .order_by(Column.position, Column.id)
            .with_for_update()
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def _task_ids(db: AsyncSession, column_id: int) -> List[int]:
        query = (
            select(Task.id)
            .where(Task.column_id == column_id)
            .order_by(Task.position, Task.id)
            .with_for_update()
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def _write_board_order(db: AsyncSession, owner_id: int, board_ids: Sequence[int], now) -> None:
        for position, board_id in enumerate(board_ids):
            stmt = update(Board).where(
                Board.id == board_id,
                Board.owner_id == owner_id
            ).values(position=position, updated_at=now)
            await db.execute(stmt)

    @staticmethod
    async def _write_column_order(db: AsyncSession, board_id: int, column_ids: Sequence[int], now) -> None:
        for position, column_id in enumerate(column_ids):
            stmt = update(Column).where(
                Column.id == column_id,
                Column.board_id == board_id
            ).values(position=position, updated_at=now)
            await db.execute(stmt)

    @staticmethod
    async def _write_task_order(db: AsyncSession, column_id: int, task_ids: Sequence[int], now) -> None:
        # column_id пишется явно: так же переносится перемещаемая задача
        for position, task_id in enumerate(task_ids):
            stmt = update(Task).where(Task.id == task_id).values(
                column_id=column_id,
                position=position,
                updated_at=now
            )
            await db.execute(stmt)

    @staticmethod
    async def _stamp_columns(db: AsyncSession, column_ids: Sequence[int], now) -> None:
        stmt = update(Column).where(Column.id.in_(list(column_ids))).values(updated_at=now)
        await db.execute(stmt)

    @staticmethod
    async def _stamp_board(db: AsyncSession, board_id: int, now) -> None:
        stmt = update(Board).where(Board.id == board_id).values(updated_at=now)
        await db.execute(stmt)

    @staticmethod
    async def _commit_or_rollback(db: AsyncSession, action: str) -> None:
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            api_logger.error(f"Commit failed for {action}: {e}")
            raise TransactionFailure(f"Failed to {action}") from e

    @staticmethod
    async def _abort(db: AsyncSession, action: str, error: Exception) -> None:
        await db.rollback()
        if isinstance(error, TaskboardError):
            debug_logger.warning(f"Отклонено ({action}): {error.code}: {error.detail}")
            raise error
        debug_logger.error(f"Ошибка при операции {action}: {error}")
        api_logger.error(f"Failed to {action}: {error}")
        raise TransactionFailure(f"Failed to {action}") from error

    @staticmethod
    @log_function()
    async def reorder_boards(
        db: AsyncSession,
        user_id: int,
        board_ids: List[int]
    ) -> List[int]:
        """Persist a full new order of the caller's boards.

        ``board_ids`` must list every board the caller owns exactly once.
        """
        action = f"reorder boards of user {user_id}"
        try:
            for board_id in board_ids:
                ensure_identifier(board_id, "board id")
        except Exception as e:
            await MoveService._abort(db, action, e)

        async with owner_locks.hold(user_id):
            try:
                current = await MoveService._board_ids(db, user_id)
                _check_permutation(board_ids, current, "board_ids")
                if list(board_ids) != current:
                    await MoveService._write_board_order(db, user_id, board_ids, utcnow())
            except Exception as e:
                await MoveService._abort(db, action, e)
            await MoveService._commit_or_rollback(db, action)

        debug_logger.info(f"Порядок досок пользователя {user_id} обновлен: {board_ids}")
        return list(board_ids)

    @staticmethod
    @log_function()
    async def reorder_columns(
        db: AsyncSession,
        user_id: int,
        board_id: int,
        column_ids: List[int]
    ) -> List[int]:
        """Persist a full new column order for a board.

        ``column_ids`` must be a permutation of the board's columns. Column
        positions, column timestamps and the board timestamp commit together.
        """
        action = f"reorder columns of board {board_id}"
        try:
            await AccessService.get_owned_board(db, user_id, board_id)
            for column_id in column_ids:
                ensure_identifier(column_id, "column id")
        except Exception as e:
            await MoveService._abort(db, action, e)

        async with board_locks.hold(board_id):
            try:
                current = await MoveService._column_ids(db, board_id)
                _check_permutation(column_ids, current, "column_ids")
                if list(column_ids) != current:
                    now = utcnow()
                    await MoveService._write_column_order(db, board_id, column_ids, now)
                    await MoveService._stamp_board(db, board_id, now)
            except Exception as e:
                await MoveService._abort(db, action, e)
            await MoveService._commit_or_rollback(db, action)

        debug_logger.info(f"Порядок колонок доски {board_id} обновлен: {column_ids}")
        return list(column_ids)

    @staticmethod
    @log_function()
    async def reorder_tasks(
        db: AsyncSession,
        user_id: int,
        column_id: int,
        task_ids: List[int]
    ) -> List[int]:
        """Persist a full new task order for a column.

        Task positions and the column timestamp commit together.
        """
        action = f"reorder tasks of column {column_id}"
        try:
            column = await AccessService.get_owned_column(db, user_id, column_id)
            board_id = column.board_id
            for task_id in task_ids:
                ensure_identifier(task_id, "task id")
        except Exception as e:
            await MoveService._abort(db, action, e)

        async with board_locks.hold(board_id):
            try:
                current = await MoveService._task_ids(db, column_id)
                _check_permutation(task_ids, current, "task_ids")
                if list(task_ids) != current:
                    now = utcnow()
                    await MoveService._write_task_order(db, column_id, task_ids, now)
                    await MoveService._stamp_columns(db, [column_id], now)
            except Exception as e:
                await MoveService._abort(db, action, e)
            await MoveService._commit_or_rollback(db, action)

        debug_logger.info(f"Порядок задач в колонке {column_id} обновлен: {task_ids}")
        return list(task_ids)

    @staticmethod
    @log_function()
    async def move_task(
        db: AsyncSession,
        user_id: int,
        task_id: int,
        source_column_id: int,
        destination_column_id: int,
        destination_index: int
    ) -> Dict[int, List[int]]:
        """Move a task to ``destination_index`` of the destination column.

        Both columns' task orders, the task's owning column, both column
        timestamps and the board timestamp commit as one unit. A retry of a
        move that already happened is applied to the current state: the task
        is placed at the requested index of the column it is already in.

        Returns the new task order of every touched column.
        """
        action = f"move task {task_id} to column {destination_column_id}"
        try:
            if isinstance(destination_index, bool) or not isinstance(destination_index, int) or destination_index < 0:
                raise InvalidInput("Destination index out of range")
            ensure_identifier(source_column_id, "source column id")
            ensure_identifier(destination_column_id, "destination column id")
            await AccessService.get_owned_task(db, user_id, task_id)
            source = await AccessService.get_owned_column(db, user_id, source_column_id)
            destination = await AccessService.get_owned_column(db, user_id, destination_column_id)
            if source.board_id != destination.board_id:
                raise InvalidInput("Columns belong to different boards")
            board_id = source.board_id
        except Exception as e:
            await MoveService._abort(db, action, e)

        async with board_locks.hold(board_id):
            try:
                result = await db.execute(
                    select(Task.column_id).where(Task.id == task_id).with_for_update()
                )
                current_column_id = result.scalar()
                if current_column_id == destination_column_id and source_column_id != destination_column_id:
                    # Повтор уже примененного перемещения
                    debug_logger.debug(f"Задача {task_id} уже в колонке {destination_column_id}, повтор применяется к текущему состоянию")
                    source_column_id = destination_column_id
                    retry = True
                elif current_column_id != source_column_id:
                    raise InvalidInput("Task is not in the source column")
                else:
                    retry = False

                source_ids = await MoveService._task_ids(db, source_column_id)
                source_index = source_ids.index(task_id)
                now = utcnow()

                if source_column_id == destination_column_id:
                    if retry:
                        destination_index = min(destination_index, len(source_ids) - 1)
                    elif destination_index >= len(source_ids):
                        raise InvalidInput("Destination index out of range")
                    new_ids = reorder_within_list(source_ids, source_index, destination_index)
                    orders = {source_column_id: list(new_ids)}
                    if new_ids is not source_ids:
                        await MoveService._write_task_order(db, source_column_id, new_ids, now)
                        await MoveService._stamp_columns(db, [source_column_id], now)
                        await MoveService._stamp_board(db, board_id, now)
                else:
                    destination_ids = await MoveService._task_ids(db, destination_column_id)
                    new_source, new_destination = move_between_lists(
                        source_ids, destination_ids, source_index, destination_index
                    )
                    await MoveService._write_task_order(db, source_column_id, new_source, now)
                    await MoveService._write_task_order(db, destination_column_id, new_destination, now)
                    await MoveService._stamp_columns(db, [source_column_id, destination_column_id], now)
                    await MoveService._stamp_board(db, board_id, now)
                    orders = {
                        source_column_id: list(new_source),
                        destination_column_id: list(new_destination),
                    }
            except Exception as e:
                await MoveService._abort(db, action, e)
            await MoveService._commit_or_rollback(db, action)

        debug_logger.info(f"Задача {task_id} перемещена в колонку {destination_column_id} на позицию {destination_index}")
        return orders

    @staticmethod
    @log_function()
    async def move_column(
        db: AsyncSession,
        user_id: int,
        column_id: int,
        destination_index: int
    ) -> List[int]:
        """Move one column to ``destination_index`` of its board.

        The column is located by id in the current order, so retrying a move
        that already happened leaves the order as it is.
        """
        action = f"move column {column_id}"
        try:
            if isinstance(destination_index, bool) or not isinstance(destination_index, int) or destination_index < 0:
                raise InvalidInput("Destination index out of range")
            column = await AccessService.get_owned_column(db, user_id, column_id)
            board_id = column.board_id
        except Exception as e:
            await MoveService._abort(db, action, e)

        async with board_locks.hold(board_id):
            try:
                current = await MoveService._column_ids(db, board_id)
                if column_id not in current:
                    raise NotFound("Column not found")
                if destination_index >= len(current):
                    raise InvalidInput("Destination index out of range")
                new_order = reorder_within_list(current, current.index(column_id), destination_index)
                if new_order is not current:
                    now = utcnow()
                    await MoveService._write_column_order(db, board_id, new_order, now)
                    await MoveService._stamp_board(db, board_id, now)
            except Exception as e:
                await MoveService._abort(db, action, e)
            await MoveService._commit_or_rollback(db, action)

        debug_logger.info(f"Колонка {column_id} перемещена на позицию {destination_index}")
        return list(new_order)

    @staticmethod
    async def apply_move(
        db: AsyncSession,
        user_id: int,
        kind: str,
        descriptor: MoveDescriptor
    ):
        """Apply a move descriptor built by a client.

        ``column`` descriptors have boards as containers, ``task`` descriptors
        have columns. The source index is informational: the server locates the
        entity in its current order.
        """
        if kind == TASK_MOVE:
            return await MoveService.move_task(
                db,
                user_id,
                descriptor.entity_id,
                descriptor.source_container_id,
                descriptor.destination_container_id,
                descriptor.destination_index,
            )
        if kind == COLUMN_MOVE:
            if not descriptor.same_container:
                raise InvalidInput("Columns can only be reordered within their board")
            return await MoveService.move_column(
                db,
                user_id,
                descriptor.entity_id,
                descriptor.destination_index,
            )
        raise InvalidInput(f"Unknown move kind: {kind}")
