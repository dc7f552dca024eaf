from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskboard.db import init_db
from taskboard.core import get_settings
from taskboard.core.exceptions import TaskboardError
from taskboard.api.v1 import api_router
from taskboard.core.middleware import RequestLoggingMiddleware
from taskboard.logs.server_log import api_logger

# Get application settings
settings = get_settings()

# Lifespan event handler
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    try:
        await init_db()
        api_logger.info("Database initialized successfully")
    except Exception as e:
        api_logger.error(f"Error initializing database: {e}")
        raise
    
    yield


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Kanban board API: ordered columns and tasks with atomic reordering",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(RequestLoggingMiddleware)
    
    @app.exception_handler(TaskboardError)
    async def taskboard_error_handler(request: Request, exc: TaskboardError):
        if exc.status_code >= 500:
            api_logger.error(f"{request.method} {request.url}: {exc.code}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.code, "detail": exc.detail},
        )
    
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Некорректные id и индексы отдаем как invalid-input
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "invalid-input", "detail": jsonable_encoder(exc.errors())},
        )
    
    app.include_router(api_router)
    
    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {"message": f"{settings.PROJECT_NAME} is running"}
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    api_logger.info("Сервер запускается на http://0.0.0.0:8000")
    
    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
