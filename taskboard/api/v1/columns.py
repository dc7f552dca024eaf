from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.database import get_async_session
from taskboard.api.dependencies.auth import get_current_user
from taskboard.models.user import User
from taskboard.services.access_service import AccessService
from taskboard.services.column_service import ColumnService
from taskboard.services.move_service import MoveService
from taskboard.schemas.column import ColumnCreate, ColumnResponse
from taskboard.schemas.moves import ColumnOrderUpdate, ColumnMove, MoveResult

board_columns_router = APIRouter(
    prefix="/boards/{board_id}/columns",
    tags=["columns"],
)

router = APIRouter(
    prefix="/columns",
    tags=["columns"],
)


@board_columns_router.put("/reorder", response_model=MoveResult)
async def reorder_columns(
    board_id: int,
    column_order: ColumnOrderUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Persist a new column order for a board (owner only)"""
    await MoveService.reorder_columns(
        db=db,
        user_id=current_user.id,
        board_id=board_id,
        column_ids=column_order.column_ids
    )
    return {"success": True}


@board_columns_router.post("", response_model=ColumnResponse, status_code=status.HTTP_201_CREATED)
async def create_column(
    board_id: int,
    column_create: ColumnCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Append a column to a board (owner only)"""
    await AccessService.get_owned_board(db, current_user.id, board_id)
    return await ColumnService.create(
        db=db,
        board_id=board_id,
        title=column_create.title,
        color=column_create.color,
        wip_limit=column_create.wip_limit
    )


@router.delete("/{column_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_column(
    column_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a column and its tasks (owner only)"""
    column = await AccessService.get_owned_column(db, current_user.id, column_id)
    await ColumnService.delete(db=db, column=column)


@router.put("/{column_id}/move", response_model=MoveResult)
async def move_column(
    column_id: int,
    column_move: ColumnMove,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Move one column to a new index of its board (owner only)"""
    await MoveService.move_column(
        db=db,
        user_id=current_user.id,
        column_id=column_id,
        destination_index=column_move.destination_index
    )
    return {"success": True}
