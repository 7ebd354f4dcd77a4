"""
routers/coach.py — AI Coach Endpoints
=======================================
Life areas, prompts, tags, sessions and messages. Handlers are thin:
everything interesting lives in services/coach.py.

POST /sessions/{id}/messages is the chat turn: it stores the user's
message, asks the ai-chat relay for a reply, and returns the stored
assistant message.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from daybook.auth import get_current_user
from daybook.database import get_db
from daybook.models import Profile
from daybook.schemas import (
    AIPromptCreate, AIPromptResponse, InteractionCreate, LifeAreaCreate, LifeAreaResponse,
    LifeAreaUpdate, MessageCreate, MessageResponse, SessionActiveUpdate, SessionCreate,
    SessionResponse, SessionSummaryUpdate, SystemPromptResponse, SystemPromptUpdate,
    TagCreate, TagResponse,
)
from daybook.services import coach, relay

router = APIRouter(prefix="/api/v1/coach", tags=["coach"])


# ─── Life areas ────────────────────────────────────────────

@router.get("/life-areas", response_model=list[LifeAreaResponse])
def list_life_areas(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_life_areas(db, user)


@router.post("/life-areas", response_model=LifeAreaResponse, status_code=201)
def create_life_area(body: LifeAreaCreate, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.create_life_area(db, user, body)


@router.patch("/life-areas/{life_area_id}", response_model=LifeAreaResponse)
def update_life_area(
    life_area_id: str,
    body: LifeAreaUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.update_life_area(db, user, life_area_id, body)


@router.delete("/life-areas/{life_area_id}", status_code=204)
def delete_life_area(life_area_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    coach.delete_life_area(db, user, life_area_id)
    return Response(status_code=204)


@router.get("/life-areas/{life_area_id}/prompt", response_model=SystemPromptResponse)
def get_life_area_prompt(life_area_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_system_prompt(db, user, life_area_id)


@router.put("/life-areas/{life_area_id}/prompt", response_model=SystemPromptResponse)
def save_life_area_prompt(
    life_area_id: str,
    body: SystemPromptUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.save_system_prompt(db, user, life_area_id, body.system_prompt)


@router.get("/life-areas/{life_area_id}/default-prompt", response_model=SystemPromptResponse)
def get_default_prompt(life_area_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    """The placeholder shown in the prompt editor before anything is saved."""
    area = next((a for a in coach.fetch_life_areas(db, user) if a.id == life_area_id), None)
    name = area.name if area else None
    return SystemPromptResponse(
        life_area_id=life_area_id,
        system_prompt=relay.default_system_prompt(name),
        is_default=True,
    )


# ─── Prompts & Tags ────────────────────────────────────────

@router.get("/prompts", response_model=list[AIPromptResponse])
def list_prompts(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_prompts(db, user)


@router.post("/prompts", response_model=AIPromptResponse, status_code=201)
def create_prompt(body: AIPromptCreate, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.create_prompt(db, user, body)


@router.get("/tags", response_model=list[TagResponse])
def list_tags(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_tags(db, user)


@router.post("/tags", response_model=TagResponse, status_code=201)
def create_tag(body: TagCreate, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.create_tag(db, user, body)


@router.delete("/tags/{tag_id}", status_code=204)
def delete_tag(tag_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    coach.delete_tag(db, user, tag_id)
    return Response(status_code=204)


# ─── Sessions ──────────────────────────────────────────────

@router.get("/sessions", response_model=list[SessionResponse])
def list_sessions(user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_sessions(db, user)


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(body: SessionCreate, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.create_session(db, user, body)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.session_to_response(coach.get_session(db, user, session_id))


@router.patch("/sessions/{session_id}/active", response_model=SessionResponse)
def set_session_active(
    session_id: str,
    body: SessionActiveUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.set_session_active(db, user, session_id, body.is_active)


@router.patch("/sessions/{session_id}/summary", response_model=SessionResponse)
def update_session_summary(
    session_id: str,
    body: SessionSummaryUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.update_session_summary(db, user, session_id, body.summary)


@router.post("/sessions/{session_id}/tags/{tag_id}", response_model=SessionResponse)
def add_session_tag(session_id: str, tag_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.add_session_tag(db, user, session_id, tag_id)


@router.delete("/sessions/{session_id}/tags/{tag_id}", response_model=SessionResponse)
def remove_session_tag(session_id: str, tag_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.remove_session_tag(db, user, session_id, tag_id)


# ─── Messages ──────────────────────────────────────────────

@router.get("/sessions/{session_id}/messages", response_model=list[MessageResponse])
def list_messages(session_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_messages(db, user, session_id)


@router.post("/sessions/{session_id}/messages", response_model=MessageResponse, status_code=201)
def send_message(
    session_id: str,
    body: MessageCreate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.send_message(db, user, session_id, body.content, reply_with=relay.chat_for_session)


@router.get("/sessions/{session_id}/interactions", response_model=list[MessageResponse])
def list_interactions(session_id: str, user: Profile = Depends(get_current_user), db: Session = Depends(get_db)):
    return coach.fetch_interactions(db, user, session_id)


@router.post("/sessions/{session_id}/interactions", response_model=MessageResponse, status_code=201)
def create_interaction(
    session_id: str,
    body: InteractionCreate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return coach.create_interaction(db, user, session_id, body)
