"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from campus_calendar.config import settings
from campus_calendar.database import Base, engine

# Import routers
from campus_calendar.routers import events, users, posters

# Import all models so Base.metadata knows about them
from campus_calendar.models.user import User                       # noqa: F401
from campus_calendar.models.event import Event, RecurrenceGroup    # noqa: F401

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Campus Event Calendar",
    description="Campus events in calendar and list views — recurring series, month-only dates, poster extraction",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(posters.router, prefix="/api/posters", tags=["Posters"])


@app.exception_handler(SQLAlchemyError)
def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Storage failures reach the client as a generic retryable error."""
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Operation failed, please retry"})


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
