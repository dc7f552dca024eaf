"""Optimistic drag-and-drop state for one board.

A completed drag is applied to the in-memory board at once, then persisted
with one request. Requests of a board go out strictly one after another in
the order the moves were made. A failed or timed out request restores the
board to the state it had before that move.
"""
import asyncio
import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import BaseModel

from taskboard.client.state import BoardState
from taskboard.client.transport import BoardTransport
from taskboard.core import get_settings
from taskboard.logs import debug_logger
from taskboard.services.reorder import MoveDescriptor, apply_descriptor, reorder_within_list

COLUMN_MOVE = "column"
TASK_MOVE = "task"


class MoveState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class DragLocation(BaseModel):
    droppable_id: int
    index: int


class DragResult(BaseModel):
    """What the UI reports when a drag gesture ends"""
    type: str
    draggable_id: int
    source: DragLocation
    destination: Optional[DragLocation] = None


@dataclass
class PendingMove:
    sequence: int
    kind: str
    descriptor: MoveDescriptor
    snapshot: BoardState
    state: MoveState = MoveState.PENDING
    error: Optional[BaseException] = None
    request: Optional["asyncio.Task[PendingMove]"] = field(default=None, repr=False)


class OptimisticBoardController:
    """Applies moves to a board optimistically and reconciles with the server.

    Must be used from a running event loop. ``move_column``, ``move_task``
    and ``handle_drag_end`` return right after the local update; the
    persistence request runs as a background task stored on the returned
    ``PendingMove``.

    Args:
        board: initial board state
        transport: object implementing ``BoardTransport``
        timeout: seconds before a request counts as failed
        notify: called with a short message when a move is reverted
    """

    def __init__(
        self,
        board: BoardState,
        transport: BoardTransport,
        timeout: Optional[float] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.board = board
        self.transport = transport
        self.timeout = timeout if timeout is not None else get_settings().REQUEST_TIMEOUT_SECONDS
        self.notify = notify or (lambda message: debug_logger.warning(message))
        self.moves: List[PendingMove] = []
        self._listeners: List[Callable[[BoardState], None]] = []
        self._request_lock = asyncio.Lock()
        self._sequence = 0

    def subscribe(self, listener: Callable[[BoardState], None]) -> Callable[[], None]:
        """Register a re-render callback, returns the unsubscribe function"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    @property
    def state(self) -> MoveState:
        """State of the most recent move, IDLE before the first one"""
        return self.moves[-1].state if self.moves else MoveState.IDLE

    @property
    def pending(self) -> List[PendingMove]:
        return [move for move in self.moves if move.state is MoveState.PENDING]

    def _set_board(self, board: BoardState) -> None:
        self.board = board
        for listener in list(self._listeners):
            listener(board)

    def _start(self, kind: str, descriptor: MoveDescriptor, snapshot: BoardState, board: BoardState) -> PendingMove:
        self._sequence += 1
        move = PendingMove(sequence=self._sequence, kind=kind, descriptor=descriptor, snapshot=snapshot)
        self.moves.append(move)
        self._set_board(board)
        move.request = asyncio.get_running_loop().create_task(self._persist(move))
        return move

    def move_column(self, source_index: int, destination_index: int) -> Optional[PendingMove]:
        """Move a column inside the board; None when nothing changes"""
        columns = self.board.columns
        if source_index == destination_index or not 0 <= source_index < len(columns):
            return None

        reordered = reorder_within_list(columns, source_index, destination_index)
        if reordered is columns:
            return None

        descriptor = MoveDescriptor(
            entity_id=columns[source_index].id,
            source_container_id=self.board.id,
            destination_container_id=self.board.id,
            source_index=source_index,
            destination_index=destination_index,
        )
        return self._start(COLUMN_MOVE, descriptor, self.board, self.board.replace_columns(reordered))

    def move_task(
        self,
        source_column_id: int,
        destination_column_id: int,
        source_index: int,
        destination_index: int,
    ) -> Optional[PendingMove]:
        """Move a task within a column or across columns; None when nothing changes"""
        source = self.board.get_column(source_column_id)
        destination = self.board.get_column(destination_column_id)
        if source is None or destination is None:
            return None
        if not 0 <= source_index < len(source.tasks):
            return None

        descriptor = MoveDescriptor(
            entity_id=source.tasks[source_index].id,
            source_container_id=source_column_id,
            destination_container_id=destination_column_id,
            source_index=source_index,
            destination_index=destination_index,
        )
        if descriptor.is_noop:
            return None

        new_source, new_destination = apply_descriptor(source.tasks, destination.tasks, descriptor)
        if new_source is source.tasks:
            return None

        board = self.board.replace_tasks({
            source_column_id: list(new_source),
            destination_column_id: list(new_destination),
        })
        return self._start(TASK_MOVE, descriptor, self.board, board)

    def handle_drag_end(self, result: DragResult) -> Optional[PendingMove]:
        """Translate a finished drag gesture into a column or task move"""
        if result.destination is None:
            return None
        if result.type == COLUMN_MOVE:
            return self.move_column(result.source.index, result.destination.index)
        if result.type == TASK_MOVE:
            return self.move_task(
                result.source.droppable_id,
                result.destination.droppable_id,
                result.source.index,
                result.destination.index,
            )
        debug_logger.warning(f"Неизвестный тип перетаскивания: {result.type}")
        return None

    async def _send(self, move: PendingMove) -> None:
        descriptor = move.descriptor
        if move.kind == COLUMN_MOVE:
            await self.transport.move_column(descriptor.entity_id, descriptor.destination_index)
        else:
            await self.transport.move_task(
                descriptor.entity_id,
                descriptor.source_container_id,
                descriptor.destination_container_id,
                descriptor.destination_index,
            )

    async def _persist(self, move: PendingMove) -> PendingMove:
        try:
            # asyncio.Lock будит ожидающих в порядке FIFO
            async with self._request_lock:
                if move.state is not MoveState.PENDING:
                    return move
                await asyncio.wait_for(self._send(move), timeout=self.timeout)
        except asyncio.CancelledError as e:
            # Отмененный запрос мог не дойти до сервера
            if move.state is MoveState.PENDING:
                self._rollback(move, e)
            raise
        except Exception as e:
            self._rollback(move, e)
        else:
            move.state = MoveState.COMMITTED
            debug_logger.debug(f"Перемещение {move.sequence} ({move.kind}) подтверждено сервером")
        return move

    def _rollback(self, move: PendingMove, error: BaseException) -> None:
        move.state = MoveState.ROLLED_BACK
        move.error = error
        # Более поздние ходы посчитаны поверх отмененного состояния и не отправляются
        for later in self.moves:
            if later.sequence > move.sequence and later.state is MoveState.PENDING:
                later.state = MoveState.ROLLED_BACK
                later.error = error
        self._set_board(move.snapshot)

        if isinstance(error, asyncio.TimeoutError):
            reason = "timed out"
        elif isinstance(error, asyncio.CancelledError):
            reason = "cancelled"
        else:
            reason = str(error)
        debug_logger.warning(f"Перемещение {move.sequence} ({move.kind}) отменено: {reason}")
        self.notify(f"Could not save the new order ({reason}), the change was reverted")

    async def drain(self) -> None:
        """Wait until every issued request has resolved"""
        requests = [move.request for move in self.moves if move.request is not None]
        if requests:
            await asyncio.gather(*requests)

    async def refresh(self) -> BoardState:
        """Re-fetch the board from the server once nothing is in flight.

        A payload fetched while new moves were made is stale for those moves
        and is discarded, the current board stays.
        """
        await self.drain()
        sequence = self._sequence
        payload = await self.transport.fetch_board(self.board.id)
        if self._sequence != sequence:
            debug_logger.debug(f"Доска {self.board.id} изменилась во время загрузки, ответ сервера отброшен")
            return self.board
        self._set_board(BoardState.from_payload(payload))
        return self.board
