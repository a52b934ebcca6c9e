import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from pune_events.core import config
from pune_events.core.logging_config import configure_logging
from pune_events.core.redis_config import get_redis_client
from pune_events.core.session import AuthSession, SessionEvent, SessionManager
from pune_events.database.db import get_db, init_db
from pune_events.dependencies import get_optional_user_id
from pune_events.routes import auth, dashboard, events, registrations, reports
from pune_events.schemas.events import HomeOut
from pune_events.services.events import list_published_events

configure_logging()
logger = logging.getLogger(__name__)


def log_session_change(event: SessionEvent, session: Optional[AuthSession]) -> None:
    if session is None:
        logger.info("Session change: %s", event.value)
    else:
        logger.info("Session change: %s (user %s)", event.value, session.user_id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables (in production, use migrations such as Alembic)
    init_db()
    sessions = SessionManager(get_redis_client(), ttl_seconds=config.SESSION_TTL_SECONDS)
    subscription = sessions.on_session_change(log_session_change)
    app.state.session_manager = sessions
    logger.info("Pune Events API started")
    yield
    subscription.unsubscribe()


app = FastAPI(title="Pune Events API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include the routers
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(dashboard.router)
app.include_router(reports.router)


@app.get("/", response_model=HomeOut, tags=["home"])
def home(
    db: Session = Depends(get_db),
    user_id: Optional[int] = Depends(get_optional_user_id),
):
    return {
        "signed_in": user_id is not None,
        "featured_events": list_published_events(db, limit=config.FEATURED_EVENTS_LIMIT),
    }


@app.get("/health", tags=["system"])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "healthy", "service": "pune-events", "database": "connected"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
