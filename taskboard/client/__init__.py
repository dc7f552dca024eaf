from taskboard.client.controller import (
    DragLocation,
    DragResult,
    MoveState,
    OptimisticBoardController,
    PendingMove,
)
from taskboard.client.state import BoardState, ColumnState, TaskState
from taskboard.client.transport import BoardTransport, HttpBoardTransport, RequestFailed

__all__ = [
    "BoardState",
    "BoardTransport",
    "ColumnState",
    "DragLocation",
    "DragResult",
    "HttpBoardTransport",
    "MoveState",
    "OptimisticBoardController",
    "PendingMove",
    "RequestFailed",
    "TaskState",
]
