from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from huddle.auth.identity import Identity
from huddle.auth.jwt import verify_access_token
from huddle.db import get_db
from huddle.services.error_codes import ErrorCode

DBSession = Annotated[Session, Depends(get_db)]


def _unauthorized(message: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": ErrorCode.UNAUTHENTICATED.value, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(request: Request) -> Identity:
    auth = request.headers.get("Authorization", "")
    if not auth:
        raise _unauthorized("missing authorization header")
    if not auth.startswith("Bearer "):
        raise _unauthorized("invalid token format")

    token = auth.removeprefix("Bearer ").strip()
    if not token:
        raise _unauthorized("missing bearer token")

    try:
        return verify_access_token(token, settings=request.app.state.settings)
    except ValueError:
        raise _unauthorized("invalid token") from None


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
