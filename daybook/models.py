"""
models.py — Database Table Definitions
========================================
The AI coach lives in the relational store. The journal itself does not:
templates, entries and ratings are held in memory by journal/store.py.

Table and column names are snake_case. The API speaks camelCase; the
translation is spelled out field by field in schemas.py and at each call
site in services/coach.py.

Every row that belongs to someone carries `user_id` → profiles.id.
Primary keys are UUID strings.
"""

import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean, Integer
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from daybook.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """A user. Authenticates with an API key, stored only as a hash."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    is_super_admin = Column(Boolean, default=False)
    api_key_hash = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class LifeArea(Base):
    """A coaching topic: Health & Fitness, Career Growth, etc."""
    __tablename__ = "life_areas"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now)


class AIPrompt(Base):
    """
    A named, reusable system prompt. A session may point at one directly
    (prompt_id); it then wins over the life area's prompt.
    """
    __tablename__ = "ai_prompts"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    system_prompt = Column(Text, nullable=False)
    life_area_id = Column(String(36), ForeignKey("life_areas.id"), nullable=True)
    is_active = Column(Boolean, default=True)
    is_global = Column(Boolean, default=False)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class AICoachPrompt(Base):
    """The per-life-area system prompt edited on the coach settings page."""
    __tablename__ = "ai_coach_prompts"

    id = Column(String(36), primary_key=True, default=_uuid)
    life_area_id = Column(String(36), ForeignKey("life_areas.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    system_prompt = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)


class AISessionTag(Base):
    """Join table: which tags are attached to which coach sessions."""
    __tablename__ = "ai_session_tags"

    session_id = Column(String(36), ForeignKey("ai_coach_sessions.id"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tags.id"), primary_key=True)
    created_at = Column(DateTime, default=_now)

    tag = relationship("Tag")


class AICoachSession(Base):
    __tablename__ = "ai_coach_sessions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    summary = Column(Text, nullable=True)
    life_area_id = Column(String(36), ForeignKey("life_areas.id"), nullable=True)
    prompt_id = Column(String(36), ForeignKey("ai_prompts.id"), nullable=True)
    is_active = Column(Boolean, default=True)
    started_at = Column(DateTime, default=_now, index=True)
    ended_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)

    life_area = relationship("LifeArea")
    prompt = relationship("AIPrompt")
    session_tags = relationship("AISessionTag", cascade="all, delete-orphan")
    messages = relationship(
        "AICoachMessage",
        back_populates="session",
        order_by="AICoachMessage.created_at",
    )


class AICoachMessage(Base):
    """One chat turn. Append-only; read back in created_at order."""
    __tablename__ = "ai_coach_messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("ai_coach_sessions.id"), nullable=False, index=True)
    role = Column(String, nullable=False)  # "system", "user", "assistant"
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, index=True)

    session = relationship("AICoachSession", back_populates="messages")


class AICoachInteraction(Base):
    """
    Older name for chat turns, kept because the interactions endpoints
    still read and write it. Same shape as AICoachMessage.
    """
    __tablename__ = "ai_coach_interactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    session_id = Column(String(36), ForeignKey("ai_coach_sessions.id"), nullable=False, index=True)
    role = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_now, index=True)
