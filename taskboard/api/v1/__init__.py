from fastapi import APIRouter
from taskboard.api.v1.boards import router as boards_router
from taskboard.api.v1.columns import router as columns_router, board_columns_router
from taskboard.api.v1.tasks import router as tasks_router, column_tasks_router

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(boards_router)
api_router.include_router(board_columns_router)
api_router.include_router(columns_router)
api_router.include_router(column_tasks_router)
api_router.include_router(tasks_router)
