"""
Admin session tokens.

A session is an HS256 JWT carried in the ``admin-token`` cookie. Only one
role exists (``admin``) and the token is valid for ``session_max_age``
seconds.
"""

import logging
import secrets
import time
from typing import Any, Dict, Optional

import jwt

from pharmacy_desk.config import Settings
from pharmacy_desk.validation import ConfigurationError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "admin-token"
ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def _require_secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ConfigurationError(
            "JWT_SECRET must be set to a strong random value"
        )
    return settings.jwt_secret


def credentials_match(
    username: str, password: str, settings: Settings
) -> bool:
    """Constant-time comparison against the configured admin credentials."""
    if not settings.admin_username or not settings.admin_password:
        raise ConfigurationError(
            "ADMIN_USERNAME and ADMIN_PASSWORD must be set"
        )
    username_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    return username_ok and password_ok


def issue_session_token(
    username: str, settings: Settings, now: Optional[int] = None
) -> str:
    issued_at = int(time.time()) if now is None else now
    claims = {
        "username": username,
        "role": ADMIN_ROLE,
        "sub": ADMIN_ROLE,
        "iat": issued_at,
        "exp": issued_at + settings.session_max_age,
    }
    return jwt.encode(claims, _require_secret(settings), algorithm=ALGORITHM)


def verify_session_token(
    token: Optional[str], settings: Settings
) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid admin token, or None."""
    if not token or not settings.jwt_secret:
        return None
    try:
        claims = jwt.decode(
            token, settings.jwt_secret, algorithms=[ALGORITHM]
        )
    except jwt.PyJWTError as e:
        logger.info(
            "Session token rejected", extra={"error_type": type(e).__name__}
        )
        return None
    if claims.get("role") != ADMIN_ROLE:
        return None
    return claims
