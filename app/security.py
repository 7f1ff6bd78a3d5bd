from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, Response, status
from jwt import InvalidTokenError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.models import Member

ALGORITHM = "HS256"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Use this type alias in routes
DB = Annotated[Session, Depends(get_db)]


def create_jwt(member_id: str, expires_minutes: int | None = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    issued = datetime.now(tz=UTC)
    claims = {"sub": member_id, "iat": issued, "exp": issued + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def set_session_cookie(response: Response, member_id: str) -> None:
    """Sign the member in on this response. Issued by the onboarding flow."""
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        create_jwt(member_id),
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )


def member_id_from_token(token: str) -> str:
    """Return the member id a session token names, or raise 401."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    member_id = claims.get("sub")
    if not member_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return str(member_id)


def get_current_member(request: Request, db: DB) -> Member:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    member = db.get(Member, member_id_from_token(token))
    if member is None or member.household_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Member not found")
    return member


CurrentMember = Annotated[Member, Depends(get_current_member)]
