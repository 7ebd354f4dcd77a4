"""
schemas.py — API Request/Response Shapes
==========================================
The client speaks camelCase, the database speaks snake_case. Every
camelCase field below carries an explicit alias instead of an automatic
alias generator, so a reader can see exactly which name maps to which.

`populate_by_name` lets services build these from Python names;
responses are serialized by alias (FastAPI's default).
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Literal

from daybook.journal.state import Answer, JournalType, Question, RatingInput

Role = Literal["system", "user", "assistant"]


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ============================================================
# Journal requests
# ============================================================

class TemplateUpdate(_Schema):
    name: str
    type: JournalType
    questions: list[Question] = []


class QuestionReorder(_Schema):
    question_ids: list[str] = Field(alias="questionIds")


class CategoryCreate(_Schema):
    name: str
    type: JournalType


class TagCreate(_Schema):
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


class EntryWrite(_Schema):
    """Body for both create and update. Ratings carry no id or timestamp."""
    template_id: Optional[str] = Field(default=None, alias="templateId")
    answers: dict[str, Answer] = {}
    ratings: list[RatingInput] = []


class BulkDelete(_Schema):
    ids: list[str]


class NotificationSettings(_Schema):
    journal: bool = True
    insights: bool = False


class PreferencesUpdate(_Schema):
    dark_mode: Optional[bool] = Field(default=None, alias="darkMode")
    notifications: Optional[NotificationSettings] = None


class PreferencesResponse(_Schema):
    dark_mode: bool = Field(alias="darkMode")
    notifications: NotificationSettings


class DarkModeResponse(_Schema):
    dark_mode: bool = Field(alias="darkMode")


class UndoResponse(_Schema):
    undone: bool


# ============================================================
# Profiles
# ============================================================

class ProfileResponse(_Schema):
    id: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    is_super_admin: bool = Field(default=False, alias="isSuperAdmin")


class ProfileUpdate(_Schema):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")


class ProfileCreate(_Schema):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


# ============================================================
# AI Coach: life areas, tags, prompts
# ============================================================

class LifeAreaCreate(_Schema):
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = Field(default=True, alias="isActive")


class LifeAreaUpdate(_Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class LifeAreaResponse(_Schema):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = Field(alias="isActive")
    user_id: str = Field(alias="userId")


class TagResponse(_Schema):
    id: str
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


class SystemPromptResponse(_Schema):
    life_area_id: str = Field(alias="lifeAreaId")
    system_prompt: str = Field(alias="systemPrompt")
    is_default: bool = Field(default=False, alias="isDefault")


class SystemPromptUpdate(_Schema):
    system_prompt: str = Field(alias="systemPrompt")


class AIPromptCreate(_Schema):
    name: str
    system_prompt: str = Field(alias="systemPrompt")
    life_area_id: Optional[str] = Field(default=None, alias="lifeAreaId")
    is_active: bool = Field(default=True, alias="isActive")
    is_global: bool = Field(default=False, alias="isGlobal")


class AIPromptResponse(_Schema):
    id: str
    name: str
    system_prompt: str = Field(alias="systemPrompt")
    life_area_id: Optional[str] = Field(default=None, alias="lifeAreaId")
    is_active: bool = Field(alias="isActive")
    is_global: bool = Field(alias="isGlobal")
    user_id: str = Field(alias="userId")


# ============================================================
# AI Coach: sessions & messages
# ============================================================

class SessionCreate(_Schema):
    title: str
    summary: Optional[str] = None
    life_area_id: Optional[str] = Field(default=None, alias="lifeAreaId")
    prompt_id: Optional[str] = Field(default=None, alias="promptId")
    is_active: bool = Field(default=True, alias="isActive")


class SessionResponse(_Schema):
    id: str
    title: str
    summary: Optional[str] = None
    life_area_id: Optional[str] = Field(default=None, alias="lifeAreaId")
    prompt_id: Optional[str] = Field(default=None, alias="promptId")
    is_active: bool = Field(alias="isActive")
    started_at: datetime = Field(alias="startedAt")
    ended_at: Optional[datetime] = Field(default=None, alias="endedAt")
    tags: list[TagResponse] = []
    user_id: str = Field(alias="userId")


class SessionActiveUpdate(_Schema):
    is_active: bool = Field(alias="isActive")


class SessionSummaryUpdate(_Schema):
    summary: str


class MessageCreate(_Schema):
    content: str = Field(min_length=1)


class MessageResponse(_Schema):
    id: str
    session_id: str = Field(alias="sessionId")
    role: Role
    content: str
    tokens_used: Optional[int] = Field(default=None, alias="tokensUsed")
    created_at: datetime = Field(alias="createdAt")


class InteractionCreate(_Schema):
    role: Role
    content: str
    tokens_used: Optional[int] = Field(default=None, alias="tokensUsed")


# ============================================================
# Relays
# ============================================================

class ChatMessage(_Schema):
    role: Role
    content: str


class ChatUsage(_Schema):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatRelayResponse(_Schema):
    """`{messages, systemPrompt}` flavor of the ai-chat relay."""
    message: ChatMessage
    usage: Optional[ChatUsage] = None


class SessionChatResponse(_Schema):
    """`{sessionId, message}` flavor of the ai-chat relay."""
    content: str
    tokens: Optional[int] = None


class TranscriptionResponse(_Schema):
    text: str


class KeyCheckResponse(_Schema):
    is_valid: bool = Field(alias="isValid")
    message: str


# ============================================================
# Health Check
# ============================================================

class HealthResponse(BaseModel):
    status: str
    environment: str
    version: str
    chat_provider: str
    openai_configured: bool
