"""
coach.py — AI Coach Data Access
=================================
Life areas, sessions, messages, prompts and tags, all scoped to the
signed-in profile.

Field names are translated by hand in both directions: request schemas
(camelCase aliases) are copied column by column into rows, and rows are
copied field by field into response schemas. No automatic mapping.

send_message is a two-phase write: the user's message is committed first,
then the relay is asked for a reply, then the reply is committed. If the
relay fails the user's message stays; there is no rollback.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from daybook.exceptions import NotFoundError, ValidationError
from daybook.models import (
    Profile, LifeArea, Tag, AIPrompt, AICoachPrompt, AICoachSession, AISessionTag,
    AICoachMessage, AICoachInteraction,
)
from daybook.schemas import (
    LifeAreaCreate, LifeAreaUpdate, LifeAreaResponse, TagCreate, TagResponse,
    SessionCreate, SessionResponse, MessageResponse, InteractionCreate,
    SystemPromptResponse, AIPromptCreate, AIPromptResponse, SessionChatResponse,
)

logger = logging.getLogger(__name__)


# ============================================================
# Row → response translation
# ============================================================

def life_area_to_response(row: LifeArea) -> LifeAreaResponse:
    return LifeAreaResponse(
        id=row.id,
        name=row.name,
        description=row.description,
        color=row.color,
        icon=row.icon,
        is_active=row.is_active,
        user_id=row.user_id,
    )


def tag_to_response(row: Tag) -> TagResponse:
    return TagResponse(id=row.id, name=row.name, color=row.color, description=row.description)


def session_to_response(row: AICoachSession) -> SessionResponse:
    return SessionResponse(
        id=row.id,
        title=row.title,
        summary=row.summary,
        life_area_id=row.life_area_id,
        prompt_id=row.prompt_id,
        is_active=row.is_active,
        started_at=row.started_at,
        ended_at=row.ended_at,
        tags=[tag_to_response(link.tag) for link in (row.session_tags or []) if link.tag is not None],
        user_id=row.user_id,
    )


def message_to_response(row) -> MessageResponse:
    """Works for both AICoachMessage and AICoachInteraction rows."""
    return MessageResponse(
        id=row.id,
        session_id=row.session_id,
        role=row.role,
        content=row.content,
        tokens_used=row.tokens_used,
        created_at=row.created_at,
    )


def prompt_to_response(row: AIPrompt) -> AIPromptResponse:
    return AIPromptResponse(
        id=row.id,
        name=row.name,
        system_prompt=row.system_prompt,
        life_area_id=row.life_area_id,
        is_active=row.is_active,
        is_global=row.is_global,
        user_id=row.user_id,
    )


# ============================================================
# Life areas
# ============================================================

def _get_life_area(db: Session, user: Profile, life_area_id: str) -> LifeArea:
    area = db.query(LifeArea).filter(LifeArea.id == life_area_id, LifeArea.user_id == user.id).first()
    if not area:
        raise NotFoundError("Life area not found")
    return area


def fetch_life_areas(db: Session, user: Profile) -> list[LifeAreaResponse]:
    rows = db.query(LifeArea).filter(LifeArea.user_id == user.id).order_by(LifeArea.name.asc()).all()
    return [life_area_to_response(r) for r in rows]


def create_life_area(db: Session, user: Profile, payload: LifeAreaCreate) -> LifeAreaResponse:
    area = LifeArea(
        user_id=user.id,
        name=payload.name,
        description=payload.description,
        color=payload.color,
        icon=payload.icon,
        is_active=payload.is_active,
    )
    db.add(area)
    db.commit()
    db.refresh(area)
    return life_area_to_response(area)


def update_life_area(db: Session, user: Profile, life_area_id: str, payload: LifeAreaUpdate) -> LifeAreaResponse:
    area = _get_life_area(db, user, life_area_id)
    if payload.name is not None:
        area.name = payload.name
    if payload.description is not None:
        area.description = payload.description
    if payload.color is not None:
        area.color = payload.color
    if payload.icon is not None:
        area.icon = payload.icon
    if payload.is_active is not None:
        area.is_active = payload.is_active
    db.commit()
    db.refresh(area)
    return life_area_to_response(area)


def delete_life_area(db: Session, user: Profile, life_area_id: str) -> None:
    area = _get_life_area(db, user, life_area_id)
    # Sessions and prompts keep pointing at nothing rather than being deleted.
    db.query(AICoachSession).filter(AICoachSession.life_area_id == area.id).update({"life_area_id": None})
    db.query(AIPrompt).filter(AIPrompt.life_area_id == area.id).update({"life_area_id": None})
    db.query(AICoachPrompt).filter(AICoachPrompt.life_area_id == area.id).delete()
    db.delete(area)
    db.commit()


# ============================================================
# System prompts
# ============================================================

def fetch_system_prompt(db: Session, user: Profile, life_area_id: str) -> SystemPromptResponse:
    """Newest active prompt saved for the life area."""
    area = _get_life_area(db, user, life_area_id)
    row = (
        db.query(AICoachPrompt)
        .filter(AICoachPrompt.life_area_id == area.id, AICoachPrompt.is_active == True)
        .order_by(AICoachPrompt.updated_at.desc())
        .first()
    )
    if not row:
        raise NotFoundError("No system prompt saved for this life area")
    return SystemPromptResponse(life_area_id=area.id, system_prompt=row.system_prompt)


def save_system_prompt(db: Session, user: Profile, life_area_id: str, system_prompt: str) -> SystemPromptResponse:
    """Update the life area's prompt if one exists, otherwise create it."""
    area = _get_life_area(db, user, life_area_id)
    row = db.query(AICoachPrompt).filter(AICoachPrompt.life_area_id == area.id).first()
    if row:
        row.system_prompt = system_prompt
        row.is_active = True
        row.updated_at = datetime.now(timezone.utc)
    else:
        row = AICoachPrompt(life_area_id=area.id, created_by=user.id, system_prompt=system_prompt)
        db.add(row)
    db.commit()
    return SystemPromptResponse(life_area_id=area.id, system_prompt=row.system_prompt)


def _get_usable_prompt(db: Session, user: Profile, prompt_id: str) -> AIPrompt:
    """A prompt the user owns, or a global one."""
    prompt = (
        db.query(AIPrompt)
        .filter(AIPrompt.id == prompt_id, (AIPrompt.user_id == user.id) | (AIPrompt.is_global == True))
        .first()
    )
    if not prompt:
        raise NotFoundError("Prompt not found")
    return prompt


def fetch_prompts(db: Session, user: Profile) -> list[AIPromptResponse]:
    rows = (
        db.query(AIPrompt)
        .filter((AIPrompt.user_id == user.id) | (AIPrompt.is_global == True))
        .order_by(AIPrompt.name.asc())
        .all()
    )
    return [prompt_to_response(r) for r in rows]


def create_prompt(db: Session, user: Profile, payload: AIPromptCreate) -> AIPromptResponse:
    if payload.life_area_id:
        _get_life_area(db, user, payload.life_area_id)
    prompt = AIPrompt(
        user_id=user.id,
        name=payload.name,
        system_prompt=payload.system_prompt,
        life_area_id=payload.life_area_id,
        is_active=payload.is_active,
        is_global=payload.is_global,
    )
    db.add(prompt)
    db.commit()
    db.refresh(prompt)
    return prompt_to_response(prompt)


# ============================================================
# Tags
# ============================================================

def fetch_tags(db: Session, user: Profile) -> list[TagResponse]:
    rows = db.query(Tag).filter(Tag.user_id == user.id).order_by(Tag.name.asc()).all()
    return [tag_to_response(r) for r in rows]


def create_tag(db: Session, user: Profile, payload: TagCreate) -> TagResponse:
    tag = Tag(user_id=user.id, name=payload.name, color=payload.color, description=payload.description)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag_to_response(tag)


def delete_tag(db: Session, user: Profile, tag_id: str) -> None:
    tag = db.query(Tag).filter(Tag.id == tag_id, Tag.user_id == user.id).first()
    if not tag:
        raise NotFoundError("Tag not found")
    db.query(AISessionTag).filter(AISessionTag.tag_id == tag.id).delete()
    db.delete(tag)
    db.commit()


# ============================================================
# Sessions
# ============================================================

def get_session(db: Session, user: Profile, session_id: str) -> AICoachSession:
    session = (
        db.query(AICoachSession)
        .filter(AICoachSession.id == session_id, AICoachSession.user_id == user.id)
        .first()
    )
    if not session:
        raise NotFoundError("Session not found")
    return session


def create_session(db: Session, user: Profile, payload: SessionCreate) -> SessionResponse:
    if payload.life_area_id:
        _get_life_area(db, user, payload.life_area_id)
    if payload.prompt_id:
        _get_usable_prompt(db, user, payload.prompt_id)
    session = AICoachSession(
        user_id=user.id,
        title=payload.title,
        summary=payload.summary,
        life_area_id=payload.life_area_id,
        prompt_id=payload.prompt_id,
        is_active=payload.is_active,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(f"Coach session started: {session.title} ({session.id})")
    return session_to_response(session)


def fetch_sessions(db: Session, user: Profile) -> list[SessionResponse]:
    """Sessions with their tags, newest first. Sessions without tags get []."""
    rows = (
        db.query(AICoachSession)
        .filter(AICoachSession.user_id == user.id)
        .order_by(AICoachSession.started_at.desc())
        .all()
    )
    return [session_to_response(r) for r in rows]


def set_session_active(db: Session, user: Profile, session_id: str, is_active: bool) -> SessionResponse:
    session = get_session(db, user, session_id)
    session.is_active = is_active
    session.ended_at = None if is_active else datetime.now(timezone.utc)
    db.commit()
    db.refresh(session)
    return session_to_response(session)


def update_session_summary(db: Session, user: Profile, session_id: str, summary: str) -> SessionResponse:
    session = get_session(db, user, session_id)
    session.summary = summary
    db.commit()
    db.refresh(session)
    return session_to_response(session)


def add_session_tag(db: Session, user: Profile, session_id: str, tag_id: str) -> SessionResponse:
    session = get_session(db, user, session_id)
    tag = db.query(Tag).filter(Tag.id == tag_id, Tag.user_id == user.id).first()
    if not tag:
        raise NotFoundError("Tag not found")
    exists = (
        db.query(AISessionTag)
        .filter(AISessionTag.session_id == session.id, AISessionTag.tag_id == tag.id)
        .first()
    )
    if not exists:
        db.add(AISessionTag(session_id=session.id, tag_id=tag.id))
        db.commit()
    db.refresh(session)
    return session_to_response(session)


def remove_session_tag(db: Session, user: Profile, session_id: str, tag_id: str) -> SessionResponse:
    session = get_session(db, user, session_id)
    db.query(AISessionTag).filter(
        AISessionTag.session_id == session.id, AISessionTag.tag_id == tag_id
    ).delete()
    db.commit()
    db.refresh(session)
    return session_to_response(session)


# ============================================================
# Messages
# ============================================================

def fetch_messages(db: Session, user: Profile, session_id: str) -> list[MessageResponse]:
    session = get_session(db, user, session_id)
    rows = (
        db.query(AICoachMessage)
        .filter(AICoachMessage.session_id == session.id)
        .order_by(AICoachMessage.created_at.asc())
        .all()
    )
    return [message_to_response(r) for r in rows]


ReplyFn = Callable[[Session, str, str, str], SessionChatResponse]


def send_message(
    db: Session,
    user: Profile,
    session_id: str,
    content: str,
    reply_with: ReplyFn,
) -> MessageResponse:
    """
    Store the user's message, ask `reply_with` (the relay) for an answer,
    store and return the assistant's message.
    """
    if not content or not content.strip():
        raise ValidationError("Message content is required")
    session = get_session(db, user, session_id)

    user_message = AICoachMessage(session_id=session.id, role="user", content=content)
    db.add(user_message)
    db.commit()

    # Relay failures propagate; the user message above is already committed.
    reply = reply_with(db, session.id, content, user.id)

    assistant_message = AICoachMessage(
        session_id=session.id,
        role="assistant",
        content=reply.content,
        tokens_used=reply.tokens,
    )
    db.add(assistant_message)
    db.commit()
    db.refresh(assistant_message)
    return message_to_response(assistant_message)


# ============================================================
# Interactions (older message table)
# ============================================================

def create_interaction(db: Session, user: Profile, session_id: str, payload: InteractionCreate) -> MessageResponse:
    session = get_session(db, user, session_id)
    row = AICoachInteraction(
        session_id=session.id,
        role=payload.role,
        content=payload.content,
        tokens_used=payload.tokens_used,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return message_to_response(row)


def fetch_interactions(db: Session, user: Profile, session_id: str) -> list[MessageResponse]:
    session = get_session(db, user, session_id)
    rows = (
        db.query(AICoachInteraction)
        .filter(AICoachInteraction.session_id == session.id)
        .order_by(AICoachInteraction.created_at.asc())
        .all()
    )
    return [message_to_response(r) for r in rows]
