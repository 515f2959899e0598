"""Maze Explorer local maze host - FastAPI application."""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from maze_explorer.config import get_settings
from maze_explorer.api.routes import maze
from maze_explorer.services.maze_registry import get_maze_registry

logger = logging.getLogger("maze_explorer")

settings = get_settings()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests with correlation IDs."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(f"[{request_id}] --> {request.method} {request.url.path}")

        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(f"[{request_id}] <-- {response.status_code} ({process_time:.2f}ms)")

        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting maze host...")
    registry = get_maze_registry()
    logger.info(f"Serving {len(registry)} mazes: {', '.join(maze_id for maze_id, _ in registry)}")

    yield

    logger.info("Shutting down maze host...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Local maze host speaking the maze session protocol",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "sessions": "/ws/{maze_id}",
    }


app.include_router(maze.router)


def serve() -> None:
    """Run the maze host with uvicorn."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve()
