from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.database import get_async_session
from taskboard.api.dependencies.auth import get_current_user
from taskboard.models.user import User
from taskboard.services.access_service import AccessService
from taskboard.services.board_service import BoardService
from taskboard.services.move_service import MoveService
from taskboard.schemas.board import BoardCreate, BoardInDB, BoardList, BoardCompleteResponse
from taskboard.schemas.moves import BoardOrderUpdate, MoveResult
from taskboard.logs import api_logger

router = APIRouter(
    prefix="/boards",
    tags=["boards"],
)


@router.post("", response_model=BoardInDB, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_create: BoardCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Create an empty board owned by the caller"""
    board = await BoardService.create(
        db=db,
        name=board_create.name,
        owner_id=current_user.id,
        description=board_create.description
    )
    api_logger.info(f"Board {board.id} created by user {current_user.id}")
    return board


@router.get("", response_model=BoardList)
async def get_boards(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """List boards owned by the caller"""
    boards = await BoardService.get_boards_by_owner(db=db, owner_id=current_user.id, skip=skip, limit=limit)
    total = await BoardService.count_by_owner(db=db, owner_id=current_user.id)
    return {"boards": boards, "total": total}


@router.put("/reorder", response_model=MoveResult)
async def reorder_boards(
    board_order: BoardOrderUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Persist a new order of the caller's boards"""
    await MoveService.reorder_boards(
        db=db,
        user_id=current_user.id,
        board_ids=board_order.board_ids
    )
    return {"success": True}


@router.get("/{board_id}", response_model=BoardCompleteResponse)
async def get_board(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Get a board with its ordered columns and tasks"""
    await AccessService.get_owned_board(db, current_user.id, board_id)
    return await BoardService.get_by_id(db=db, board_id=board_id, load_relations=True)


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a board with all its columns and tasks"""
    await AccessService.get_owned_board(db, current_user.id, board_id)
    await BoardService.delete(db=db, board_id=board_id)
    api_logger.info(f"Board {board_id} deleted by user {current_user.id}")
