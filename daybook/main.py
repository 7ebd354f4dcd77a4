"""
main.py — Application Entry Point
====================================
Run with:  uvicorn daybook.main:app --reload --port 8000
"""

import logging
import secrets
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Body, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from daybook.config import settings
from daybook.database import engine, Base, get_db
from daybook.schemas import HealthResponse, ProfileCreate
from daybook.auth import hash_api_key, require_super_admin
from daybook.exceptions import (
    DaybookError, daybook_error_handler, http_exception_handler, unexpected_exception_handler,
)
from daybook.journal.fixtures import seed_state
from daybook.journal.state import AppState
from daybook.journal.store import JournalStore, PreferencesFile
from daybook.logging_config import setup_logging
from daybook import models

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def build_store() -> JournalStore:
    initial = seed_state() if settings.seed_fixtures else AppState()
    return JournalStore(initial, PreferencesFile(settings.preferences_file))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    Base.metadata.create_all(bind=engine)
    app.state.journal_store = build_store()

    state = app.state.journal_store.state
    logger.info("Database tables created/verified")
    logger.info(f"Journal: {len(state.templates)} templates, {len(state.entries)} entries")
    logger.info(f"Chat provider: {settings.chat_provider} | OpenAI key: {'set' if settings.openai_api_key else 'missing'}")
    yield
    logger.info("Server shutting down")


app = FastAPI(
    title="Daybook API",
    description="Morning and evening journaling with an AI coach.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(DaybookError, daybook_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} {response.status_code} Completed in {process_time:.4f}s")
    return response


from daybook.routers import journal, coach, functions, profile
app.include_router(journal.router)
app.include_router(coach.router)
app.include_router(functions.router)
app.include_router(profile.router)


@app.get("/health", response_model=HealthResponse, tags=["system"])
def health_check():
    return HealthResponse(
        status="healthy",
        environment=settings.environment,
        version=VERSION,
        chat_provider=settings.chat_provider,
        openai_configured=bool(settings.openai_api_key),
    )


@app.post("/admin/create-profile", tags=["system"])
async def create_profile(
    body: ProfileCreate = Body(...),
    db: Session = Depends(get_db),
    admin: models.Profile = Depends(require_super_admin),
):
    """
    Create a new profile. Requires the API key of a super admin.
    Returns the new profile's API key. It is shown ONCE, save it!
    """
    new_api_key = secrets.token_urlsafe(32)

    profile = models.Profile(
        first_name=body.first_name,
        last_name=body.last_name,
        api_key_hash=hash_api_key(new_api_key),
        is_active=True,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)

    return {
        "message": "Profile created",
        "id": profile.id,
        "api_key": new_api_key,
        "important": "Save this API key now, it cannot be retrieved later!",
    }
