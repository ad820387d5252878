"""Session helpers (issue tokens, resolve the calling user)."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from records_api.core.config import get_settings
from records_api.core.security import TokenError, create_token, decode_token
from records_api.repositories.models import RecordId

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def issue_token(user_id: RecordId) -> str:
    """Create a signed session token for ``user_id``."""
    settings = get_settings()
    return create_token(user_id, settings.secret_key, settings.token_ttl_seconds)


def current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> RecordId:
    """FastAPI dependency returning the id of the authenticated caller."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(401, "Authentication required.", headers={"WWW-Authenticate": "Bearer"})
    try:
        return decode_token(credentials.credentials, get_settings().secret_key)
    except TokenError as exc:
        logger.info("Rejected session token: %s", exc)
        raise HTTPException(401, str(exc), headers={"WWW-Authenticate": "Bearer"}) from exc
