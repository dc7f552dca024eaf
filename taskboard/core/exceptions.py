from typing import Optional


class TaskboardError(Exception):
    """Base error for board/column/task mutations"""

    code: str = "internal-error"
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(TaskboardError):
    """Malformed identifier, out-of-range index or an order list that does not match the container"""

    code = "invalid-input"
    status_code = 400
    default_detail = "Invalid input"


class NotFound(TaskboardError):
    """Referenced board, column or task does not exist"""

    code = "not-found"
    status_code = 404
    default_detail = "Not found"


class AccessDenied(TaskboardError):
    """Caller does not own the board.

    The message is always generic so existence of foreign boards is not leaked.
    """

    code = "access-denied"
    status_code = 403
    default_detail = "Access denied"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(self.default_detail)


class TransactionFailure(TaskboardError):
    """Atomic commit failed and everything was rolled back"""

    code = "internal-error"
    status_code = 500
    default_detail = "Failed to apply change"
