"""HTTP transport used by the optimistic controller"""
from typing import Any, Dict, List, Optional, Protocol

import httpx

from taskboard.core import get_settings


class RequestFailed(Exception):
    """The server rejected or could not apply a request"""

    def __init__(self, status_code: int, code: str, detail: Any = None):
        self.status_code = status_code
        self.code = code
        self.detail = detail
        super().__init__(f"{status_code} {code}: {detail}")


class BoardTransport(Protocol):
    async def fetch_board(self, board_id: int) -> Dict[str, Any]: ...

    async def reorder_columns(self, board_id: int, column_ids: List[int]) -> None: ...

    async def reorder_tasks(self, column_id: int, task_ids: List[int]) -> None: ...

    async def move_column(self, column_id: int, destination_index: int) -> None: ...

    async def move_task(
        self,
        task_id: int,
        source_column_id: int,
        destination_column_id: int,
        destination_index: int,
    ) -> None: ...


class HttpBoardTransport:
    """Calls the board API with httpx.

    Args:
        token: bearer token of the acting user
        base_url: API root, defaults to ``API_BASE_URL`` from settings
        client: pre-built ``httpx.AsyncClient`` (tests pass one bound to the app)
    """

    def __init__(
        self,
        token: str,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
        self._headers = {"Authorization": f"Bearer {token}"}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpBoardTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await self._client.request(method, url, json=json, headers=self._headers)
        if response.is_success:
            return response.json() if response.content else {}

        try:
            body = response.json()
        except ValueError:
            body = {}
        raise RequestFailed(
            response.status_code,
            body.get("error", "internal-error"),
            body.get("detail", response.text),
        )

    async def fetch_board(self, board_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/boards/{board_id}")

    async def reorder_columns(self, board_id: int, column_ids: List[int]) -> None:
        await self._request("PUT", f"/boards/{board_id}/columns/reorder", {"column_ids": column_ids})

    async def reorder_tasks(self, column_id: int, task_ids: List[int]) -> None:
        await self._request("PUT", f"/columns/{column_id}/tasks/reorder", {"task_ids": task_ids})

    async def move_column(self, column_id: int, destination_index: int) -> None:
        await self._request("PUT", f"/columns/{column_id}/move", {"destination_index": destination_index})

    async def move_task(
        self,
        task_id: int,
        source_column_id: int,
        destination_column_id: int,
        destination_index: int,
    ) -> None:
        await self._request(
            "PUT",
            f"/tasks/{task_id}/move",
            {
                "source_column_id": source_column_id,
                "destination_column_id": destination_column_id,
                "destination_index": destination_index,
            },
        )
