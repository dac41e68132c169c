"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from court_rotation.config import settings
from court_rotation.api.routes.players import router as players_router
from court_rotation.api.routes.sessions import router as sessions_router
from court_rotation.repositories.player_repository import PlayerRepository
from court_rotation.services.session_manager import SessionManager


def get_database_path() -> Path:
    """Get the database path from settings, resolving relative paths from repo root."""
    db_path = Path(settings.database_path)
    if db_path.is_absolute():
        return db_path
    repo_root = Path(__file__).parent.parent.parent.parent
    return repo_root / db_path


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: tests may install their own repository before the app starts
    if not hasattr(app.state, "repository"):
        app.state.repository = PlayerRepository(get_database_path())
    if not hasattr(app.state, "session_manager"):
        app.state.session_manager = SessionManager(
            app.state.repository,
            default_seed=settings.random_seed,
        )
    yield


app = FastAPI(
    title="Court Rotation",
    description="Fair bench rotation and balanced doubles matchmaking",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "court-rotation"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Court Rotation API",
        "version": "0.1.0",
        "docs": "/docs",
    }


app.include_router(players_router)
app.include_router(sessions_router)
