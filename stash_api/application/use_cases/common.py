from __future__ import annotations

from datetime import datetime, timezone


USER_ID_METADATA_KEY = "user_id"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
