"""
relay.py — The AI Relays
==========================
Thin pass-throughs to the hosted AI provider. Each one:

  1. checks the fields it needs are present (RelayError otherwise)
  2. gathers context: prior messages and a system prompt
  3. builds ONE linear list of {role, content}, system prompt first
  4. calls the provider once and hands back the reply and token usage

The system prompt for a coach session is picked in this order:
  - the AIPrompt the session points at (if active, and owned by the
    session's profile or global)
  - the newest active prompt saved for the session's life area
  - DEFAULT_PROMPT_TEMPLATE filled in with the life area's name
"""

import logging
from typing import Any, Optional

import openai
from sqlalchemy.orm import Session

from daybook.exceptions import RelayError
from daybook.models import AICoachMessage, AICoachPrompt, AICoachSession
from daybook.schemas import (
    ChatMessage, ChatRelayResponse, ChatUsage, KeyCheckResponse, SessionChatResponse,
)
from daybook.services.llm import complete_chat, get_openai_client

logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")

DEFAULT_PROMPT_TEMPLATE = (
    "You are an AI coach specializing in {area}. "
    "Your goal is to help users improve in this area through thoughtful guidance, "
    "practical advice, and insightful questions. Be supportive, encouraging, and "
    "focused on helping the user make progress."
)


def default_system_prompt(area_name: Optional[str]) -> str:
    return DEFAULT_PROMPT_TEMPLATE.format(area=area_name or "personal growth")


def format_messages(system_prompt: Optional[str], messages: list[dict]) -> list[dict]:
    formatted = []
    if system_prompt:
        formatted.append({"role": "system", "content": system_prompt})
    formatted.extend({"role": m["role"], "content": m["content"]} for m in messages)
    return formatted


def parse_messages(raw: Any) -> list[dict]:
    if not raw or not isinstance(raw, list):
        raise RelayError("Messages array is required")
    parsed = []
    for item in raw:
        if (
            not isinstance(item, dict)
            or item.get("role") not in ROLES
            or not isinstance(item.get("content"), str)
        ):
            raise RelayError("Each message needs a role (system, user or assistant) and string content")
        parsed.append({"role": item["role"], "content": item["content"]})
    return parsed


# ============================================================
# ai-chat, {messages, systemPrompt} flavor
# ============================================================

def relay_chat(messages: Any, system_prompt: Optional[str] = None) -> ChatRelayResponse:
    completion = complete_chat(format_messages(system_prompt, parse_messages(messages)))
    return ChatRelayResponse(
        message=ChatMessage(role=completion.role, content=completion.content),
        usage=ChatUsage(
            prompt_tokens=completion.prompt_tokens,
            completion_tokens=completion.completion_tokens,
            total_tokens=completion.total_tokens,
        ),
    )


# ============================================================
# ai-chat, {sessionId, message} flavor
# ============================================================

def stored_life_area_prompt(db: Session, life_area_id: str) -> Optional[str]:
    row = (
        db.query(AICoachPrompt)
        .filter(AICoachPrompt.life_area_id == life_area_id, AICoachPrompt.is_active == True)
        .order_by(AICoachPrompt.updated_at.desc())
        .first()
    )
    return row.system_prompt if row else None


def usable_session_prompt(session: AICoachSession) -> Optional[str]:
    """The session's own AIPrompt, if it is active and the session's owner may use it."""
    prompt = session.prompt
    if prompt is None or not prompt.is_active:
        return None
    if prompt.user_id != session.user_id and not prompt.is_global:
        logger.warning(f"Session {session.id}: ignoring prompt {prompt.id} owned by another profile")
        return None
    return prompt.system_prompt


def resolve_system_prompt(db: Session, session: AICoachSession) -> str:
    own_prompt = usable_session_prompt(session)
    if own_prompt:
        return own_prompt
    if session.life_area_id:
        stored = stored_life_area_prompt(db, session.life_area_id)
        if stored:
            return stored
    area_name = session.life_area.name if session.life_area is not None else None
    return default_system_prompt(area_name)


def chat_for_session(
    db: Session,
    session_id: Optional[str],
    message: Optional[str],
    user_id: Optional[str] = None,
) -> SessionChatResponse:
    if not session_id:
        raise RelayError("sessionId is required")
    if not message:
        raise RelayError("message is required")

    query = db.query(AICoachSession).filter(AICoachSession.id == session_id)
    if user_id is not None:
        query = query.filter(AICoachSession.user_id == user_id)
    session = query.first()
    if session is None:
        raise RelayError("Session not found")

    history = [
        {"role": m.role, "content": m.content}
        for m in (
            db.query(AICoachMessage)
            .filter(AICoachMessage.session_id == session_id)
            .order_by(AICoachMessage.created_at.asc())
            .all()
        )
        if m.role != "system"
    ]
    # The caller usually stored the user message before asking for a reply.
    latest = {"role": "user", "content": message}
    if not history or history[-1] != latest:
        history.append(latest)

    system_prompt = resolve_system_prompt(db, session)
    logger.info(f"Session {session_id}: relaying {len(history)} messages")
    completion = complete_chat(format_messages(system_prompt, history))
    return SessionChatResponse(content=completion.content, tokens=completion.total_tokens)


# ============================================================
# test-openai-key
# ============================================================

def check_api_key(key: Optional[str]) -> KeyCheckResponse:
    if not key:
        return KeyCheckResponse(is_valid=False, message="No API key provided")
    try:
        get_openai_client(api_key=key).models.list()
    except openai.OpenAIError as e:
        logger.warning(f"OpenAI key check failed: {e}")
        return KeyCheckResponse(is_valid=False, message="Invalid API key")
    return KeyCheckResponse(is_valid=True, message="API key is valid")
