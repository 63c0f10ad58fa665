"""
Admin authentication routes.

- POST /api/auth/login - check credentials and set the session cookie
- GET /api/auth/session - report whether the caller's cookie is valid
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import JSONResponse

from pharmacy_desk.api.dependencies import get_login_use_case, get_settings
from pharmacy_desk.api.requests import LoginRequest
from pharmacy_desk.api.responses import (
    SessionResponse,
    SuccessResponse,
    error_response,
    status_code_for,
)
from pharmacy_desk.auth import SESSION_COOKIE, verify_session_token
from pharmacy_desk.config import Settings
from pharmacy_desk.usecase import LoginUseCase
from pharmacy_desk.validation import AuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/api/auth/login", response_model=SuccessResponse)
async def login(
    body: LoginRequest,
    response: Response,
    use_case: LoginUseCase = Depends(get_login_use_case),
    settings: Settings = Depends(get_settings),
) -> Union[SuccessResponse, JSONResponse]:
    """
    Log the administrator in.

    On success the signed session token is set as an HttpOnly,
    SameSite=strict cookie. A failed attempt never sets a cookie.
    """
    try:
        token = use_case.login(body.username, body.password)
    except AuthorizationError as e:
        return error_response(401, str(e))
    except Exception as e:
        logger.error(
            "Login failed",
            exc_info=True,
            extra={"error_type": type(e).__name__, "error_message": str(e)},
        )
        return error_response(status_code_for(e), "Login failed")

    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.cookie_secure,
    )
    return SuccessResponse(message="Login successful")


@router.get("/api/auth/session", response_model=SessionResponse)
async def session(
    admin_token: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    settings: Settings = Depends(get_settings),
) -> SessionResponse:
    claims = verify_session_token(admin_token, settings)
    if claims is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True, username=claims.get("username")
    )
