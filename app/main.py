"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel

from app.api.auth import router as auth_router
from app.api.errors import register_exception_handlers
from app.api.rooms import router as rooms_router
from app.api.tasks import router as tasks_router
from app.api.users import router as users_router
from app.config import get_settings
from app.db.session import engine
from app.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and create database tables on startup."""
    settings.validate()
    # Import models to register them with SQLModel
    from app.models import Room, RoomMember, Task, User  # noqa: F401
    SQLModel.metadata.create_all(engine)
    yield

app = FastAPI(
    title="Task Rooms API",
    description="Personal tasks, shared rooms and productivity statistics",
    version="1.0.0",
    lifespan=lifespan,
)

# Remove duplicates and empty strings
cors_origins = [
    origin
    for origin in {settings.FRONTEND_URL, "http://localhost:5173", "http://localhost:3000"}
    if origin
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers
app.include_router(auth_router)
app.include_router(rooms_router)
app.include_router(tasks_router)
app.include_router(users_router)


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
