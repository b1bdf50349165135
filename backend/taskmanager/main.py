"""IT Task Manager FastAPI application.

Entry point for the backend server:

    uvicorn taskmanager.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskmanager import __version__
from taskmanager.api.health import router as health_router
from taskmanager.api.routes.auth import router as auth_router
from taskmanager.api.routes.tasks import router as tasks_router
from taskmanager.api.routes.users import router as users_router
from taskmanager.config import settings
from taskmanager.core.errors import TaskManagerError
from taskmanager.db.database import create_db_and_tables
from taskmanager.middleware.auth import BearerAuthMiddleware
from taskmanager.middleware.rate_limit import RateLimitMiddleware

logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    create_db_and_tables()
    logger.info("IT Task Manager %s started (db=%s)", __version__, settings.database_url.split("://", 1)[0])
    yield


app = FastAPI(
    title="IT Task Manager",
    description="Multi-user task assignment tracker",
    version=__version__,
    lifespan=lifespan,
)

# Middleware (order matters: last added = outermost)
app.add_middleware(BearerAuthMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    global_rpm=settings.rate_limit_global_rpm,
    auth_rpm=settings.rate_limit_auth_rpm,
    max_clients=settings.rate_limit_max_clients,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(TaskManagerError)
async def domain_error_handler(request: Request, exc: TaskManagerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Please provide all required fields",
            "errors": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Storage failure."})


# Global exception handler — prevent internal details from leaking
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, HTTPException):
        raise exc
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error."},
    )


# Routes
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tasks_router)


@app.get("/")
async def root():
    return {"name": "IT Task Manager", "version": __version__, "status": "running"}
