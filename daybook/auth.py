"""
auth.py — Profile Authentication
==================================
A profile signs in with one API key, sent in the X-API-Key header. Only
the SHA-256 hash is stored, in profiles.api_key_hash.

The header's hash is looked up directly (one indexed query), then
compared in constant time before the profile is trusted. Inactive
profiles are treated the same as unknown keys.

`require_super_admin` stacks on top of `get_current_user` for the admin
endpoints.
"""

import hashlib
import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from daybook.database import get_db
from daybook.models import Profile

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()


def verify_api_key(plain_key: str, hashed_key: str) -> bool:
    return hmac.compare_digest(hash_api_key(plain_key), hashed_key)


def find_profile(db: Session, api_key: str) -> Optional[Profile]:
    """The active profile holding this key, or None."""
    profile = (
        db.query(Profile)
        .filter(Profile.api_key_hash == hash_api_key(api_key), Profile.is_active == True)
        .first()
    )
    if profile is None or not verify_api_key(api_key, profile.api_key_hash):
        return None
    return profile


async def get_current_user(
    api_key: Optional[str] = Security(api_key_header),
    db: Session = Depends(get_db),
) -> Profile:
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key header.")

    profile = find_profile(db, api_key)
    if profile is None:
        logger.warning("Rejected request with an unknown or inactive API key")
        raise HTTPException(status_code=401, detail="Invalid API key.")
    return profile


async def require_super_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if not user.is_super_admin:
        raise HTTPException(status_code=403, detail="Only super admins can create profiles.")
    return user
