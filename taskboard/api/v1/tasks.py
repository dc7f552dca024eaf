from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.database import get_async_session
from taskboard.api.dependencies.auth import get_current_user
from taskboard.models.user import User
from taskboard.services.access_service import AccessService
from taskboard.services.task_service import TaskService
from taskboard.services.move_service import MoveService
from taskboard.schemas.task import TaskCreate, TaskUpdate, TaskResponse
from taskboard.schemas.moves import TaskOrderUpdate, TaskMove, MoveResult

column_tasks_router = APIRouter(
    prefix="/columns/{column_id}/tasks",
    tags=["tasks"],
)

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)


@column_tasks_router.put("/reorder", response_model=MoveResult)
async def reorder_tasks(
    column_id: int,
    task_order: TaskOrderUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Persist a new task order for a column (owner only)"""
    await MoveService.reorder_tasks(
        db=db,
        user_id=current_user.id,
        column_id=column_id,
        task_ids=task_order.task_ids
    )
    return {"success": True}


@column_tasks_router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    column_id: int,
    task_create: TaskCreate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Append a task to a column (owner only)"""
    column = await AccessService.get_owned_column(db, current_user.id, column_id)
    return await TaskService.create(
        db=db,
        board_id=column.board_id,
        column_id=column_id,
        title=task_create.title,
        description=task_create.description,
        priority=task_create.priority,
        labels=[label.model_dump() for label in task_create.labels],
        subtasks=[subtask.model_dump() for subtask in task_create.subtasks],
        due_date=task_create.due_date
    )


@router.put("/{task_id}/move", response_model=MoveResult)
async def move_task(
    task_id: int,
    task_move: TaskMove,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Move a task within its column or to another column of the same board (owner only)"""
    await MoveService.move_task(
        db=db,
        user_id=current_user.id,
        task_id=task_id,
        source_column_id=task_move.source_column_id,
        destination_column_id=task_move.destination_column_id,
        destination_index=task_move.destination_index
    )
    return {"success": True}


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    return await AccessService.get_owned_task(db, current_user.id, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Update task content; order and column change only through move/reorder"""
    await AccessService.get_owned_task(db, current_user.id, task_id)
    fields = task_update.model_dump(exclude_unset=True, mode="json")
    if task_update.priority is not None:
        fields["priority"] = task_update.priority
    if task_update.due_date is not None:
        fields["due_date"] = task_update.due_date
    return await TaskService.update(db=db, task_id=task_id, **fields)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a task (owner only)"""
    task = await AccessService.get_owned_task(db, current_user.id, task_id)
    column = await AccessService.get_owned_column(db, current_user.id, task.column_id)
    await TaskService.delete(db=db, task=task, board_id=column.board_id)
