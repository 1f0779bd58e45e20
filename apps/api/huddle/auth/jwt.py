from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from jwt import PyJWTError

from huddle.auth.identity import Identity
from huddle.core.config import Settings, settings as default_settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    user_id: int,
    ttl_seconds: int | None = None,
    *,
    settings: Settings = default_settings,
) -> str:
    now = _now()
    exp = now + timedelta(seconds=ttl_seconds or settings.access_token_ttl_seconds)
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str, *, settings: Settings = default_settings) -> Identity:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise ValueError("invalid subject claim") from exc
    if user_id <= 0:
        raise ValueError("invalid subject claim")

    return Identity(user_id=user_id)
