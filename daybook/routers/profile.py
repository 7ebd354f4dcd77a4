"""
routers/profile.py — The Signed-In Profile
============================================
Read and edit your own name and avatar. Preferences live with the
journal (routers/journal.py) because dark mode is part of the AppState.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from daybook.auth import get_current_user
from daybook.database import get_db
from daybook.models import Profile
from daybook.schemas import ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


def profile_to_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        first_name=profile.first_name,
        last_name=profile.last_name,
        avatar_url=profile.avatar_url,
        is_super_admin=bool(profile.is_super_admin),
    )


@router.get("", response_model=ProfileResponse)
def read_profile(user: Profile = Depends(get_current_user)):
    return profile_to_response(user)


@router.patch("", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdate,
    user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body are changed."""
    changes = body.model_dump(exclude_unset=True)
    if "first_name" in changes:
        user.first_name = changes["first_name"]
    if "last_name" in changes:
        user.last_name = changes["last_name"]
    if "avatar_url" in changes:
        user.avatar_url = changes["avatar_url"]
    db.commit()
    db.refresh(user)
    return profile_to_response(user)
