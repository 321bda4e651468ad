import logging
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from .db import get_db
from . import models

logger = logging.getLogger("auth")


def get_profile(
    profile_id: str | None = Header(default=None, convert_underscores=False),
    db: Session = Depends(get_db),
) -> models.Profile:
    """Resolve the acting profile from the `profile_id` request header."""
    if profile_id is None:
        raise HTTPException(status_code=401, detail="Missing profile_id header")
    profile = db.get(models.Profile, int(profile_id)) if profile_id.isdigit() else None
    if profile is None:
        logger.warning("Unknown profile_id %s", profile_id)
        raise HTTPException(status_code=401, detail="Unknown profile")
    return profile


def require_roles(*types: str):
    allowed = set(types)

    def checker(profile: models.Profile = Depends(get_profile)) -> models.Profile:
        if profile.type not in allowed:
            raise HTTPException(status_code=403, detail=f"Profile type '{profile.type}' not allowed")
        return profile

    return checker
