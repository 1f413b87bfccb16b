"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.logging_setup import setup_console_logging
from learncheck import __version__
from learncheck.config import LOG_LEVEL
from learncheck.database import init_db
from learncheck.routes import quiz
from learncheck.services.cleanup_service import schedule_sessions_cleanup

setup_console_logging(LOG_LEVEL)

app = FastAPI(title="LearnCheck Quiz API", version=__version__)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and schedule cleanup tasks on startup."""
    init_db()
    schedule_sessions_cleanup()


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


# Include routers
app.include_router(quiz.router)
