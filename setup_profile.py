"""
setup_profile.py — Create your profile. Run once after first deploy.

Usage: python setup_profile.py

Uses DAYBOOK_API_KEY from .env as the key. The first profile is a super
admin, so it can issue keys for others via /admin/create-profile.
"""

from typing import Optional

from sqlalchemy.orm import Session

from daybook.config import settings
from daybook.database import engine, Base, session_scope
from daybook.models import Profile
from daybook.auth import hash_api_key


def create_first_profile(
    db: Session,
    api_key: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> Optional[Profile]:
    """Add the super-admin profile. Returns None if any profile already exists."""
    if db.query(Profile).first():
        return None
    profile = Profile(
        first_name=first_name,
        last_name=last_name,
        api_key_hash=hash_api_key(api_key),
        is_super_admin=True,
    )
    db.add(profile)
    db.flush()
    return profile


def setup():
    if not settings.daybook_api_key:
        print("DAYBOOK_API_KEY is not set. Add it to .env and run again.")
        return

    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        profile = create_first_profile(
            db,
            settings.daybook_api_key,
            first_name=input("First name: ").strip() or None,
            last_name=input("Last name: ").strip() or None,
        )
        if profile is None:
            print("A profile already exists. Delete daybook.db and run again to reset.")
            return
        label = profile.first_name or profile.id

    print(f"\n✓ Profile created: {label}")
    print("✓ API key hashed and stored.")
    print("\nStart the server:")
    print("  uvicorn daybook.main:app --reload --port 8000")


if __name__ == "__main__":
    setup()
