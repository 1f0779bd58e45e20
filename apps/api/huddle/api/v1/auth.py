from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from huddle.api.errors import http_error_from_service
from huddle.auth.deps import DBSession
from huddle.auth.jwt import create_access_token
from huddle.auth.password import hash_password, password_needs_rehash, verify_password
from huddle.models import User
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import ConflictError, ServiceError
from huddle.services.lookups import commit

router = APIRouter(prefix="/auth", tags=["auth"])

logger = structlog.get_logger(__name__)

# One message for every collision; the colliding field is never named.
SIGNUP_CONFLICT_MESSAGE = "account could not be created"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: datetime


class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: int


@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupIn, db: DBSession):
    email = payload.email.strip().lower()
    try:
        existing = db.scalar(select(User).where(User.email == email))
        if existing:
            raise ConflictError(ErrorCode.ACCOUNT_EXISTS.value, SIGNUP_CONFLICT_MESSAGE)

        user = User(email=email, password_hash=hash_password(payload.password))
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ConflictError(ErrorCode.ACCOUNT_EXISTS.value, SIGNUP_CONFLICT_MESSAGE) from None
        commit(db, "signup")
    except ServiceError as err:
        raise http_error_from_service(err) from err

    logger.info("user_signed_up", user_id=user.id)
    return UserOut.model_validate(user)


class LoginIn(BaseModel):
    email: EmailStr
    password: str


@router.post("/login", response_model=AccessTokenOut)
def login(payload: LoginIn, request: Request, db: DBSession):
    app_settings = request.app.state.settings
    email = payload.email.strip().lower()
    user = db.scalar(select(User).where(User.email == email))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=401,
            detail={"code": ErrorCode.UNAUTHENTICATED.value, "message": "invalid credentials"},
        )

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(payload.password)
        db.add(user)
        try:
            commit(db, "rehash password")
        except ServiceError as err:
            raise http_error_from_service(err) from err

    access_token = create_access_token(user.id, settings=app_settings)
    logger.info("user_logged_in", user_id=user.id)
    return AccessTokenOut(
        access_token=access_token,
        expires_in=app_settings.access_token_ttl_seconds,
        user_id=user.id,
    )
