from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import jwt
from jwt.exceptions import PyJWTError

from clinic_scheduler.core.config import settings


@dataclass(frozen=True)
class AuthorizationContext:
    """Who is acting, and in which branch. Built once per request."""

    actor_id: str
    branch_id: str
    roles: Tuple[str, ...] = ()
    permissions: frozenset = field(default_factory=frozenset)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None if the token does not verify."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except PyJWTError:
        return None
