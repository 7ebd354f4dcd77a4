"""
routers/functions.py — Relay Endpoints
========================================
The three "serverless functions": ai-chat, transcribe-audio and
test-openai-key. Each parses its JSON body by hand so that a missing
field is answered the way every relay failure is answered:

    HTTP 500  {"error": "<what went wrong>"}

ai-chat accepts two body shapes:
    {messages, systemPrompt}  →  {message, usage}
    {sessionId, message}      →  {content, tokens}
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from daybook.auth import get_current_user
from daybook.database import get_db
from daybook.exceptions import DaybookError, RelayError, error_response
from daybook.models import Profile
from daybook.schemas import TranscriptionResponse
from daybook.services import relay
from daybook.services.transcription import decode_audio, transcribe_audio

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])


async def _read_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise RelayError("Request body must be JSON")
    if not isinstance(body, dict):
        raise RelayError("Request body must be a JSON object")
    return body


def _failed(name: str, exc: Exception) -> JSONResponse:
    if isinstance(exc, DaybookError):
        logger.warning(f"{name} failed: {exc.message}")
        return error_response(500, exc.message)
    logger.error(f"{name} failed: {exc}", exc_info=True)
    return error_response(500, str(exc) or "Failed to process request")


@router.post("/ai-chat")
async def ai_chat(
    request: Request,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        body = await _read_body(request)
        if "sessionId" in body:
            result = await run_in_threadpool(
                relay.chat_for_session, db, body.get("sessionId"), body.get("message"), user.id,
            )
        else:
            result = await run_in_threadpool(relay.relay_chat, body.get("messages"), body.get("systemPrompt"))
    except Exception as e:
        return _failed("AI chat", e)
    return JSONResponse(content=result.model_dump(by_alias=True, exclude_none=True))


@router.post("/transcribe-audio")
async def transcribe(request: Request, user: Profile = Depends(get_current_user)):
    try:
        body = await _read_body(request)
        audio_bytes = decode_audio(body.get("audio"))
        text = await transcribe_audio(audio_bytes)
    except Exception as e:
        return _failed("Transcription", e)
    return JSONResponse(content=TranscriptionResponse(text=text).model_dump())


@router.post("/test-openai-key")
async def test_openai_key(request: Request, user: Profile = Depends(get_current_user)):
    try:
        body = await _read_body(request)
        result = await run_in_threadpool(relay.check_api_key, body.get("key"))
    except Exception as e:
        return _failed("Key check", e)
    return JSONResponse(content=result.model_dump(by_alias=True))
