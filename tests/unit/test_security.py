"""Unit tests for session tokens."""

import jwt
import pytest
from fastapi import HTTPException, Response

from app.config import settings
from app.security import ALGORITHM, create_jwt, member_id_from_token, set_session_cookie


class TestSessionTokens:
    """Signing and reading member sessions."""

    def test_round_trip(self) -> None:
        assert member_id_from_token(create_jwt("member-1")) == "member-1"

    def test_expired_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            member_id_from_token(create_jwt("member-1", expires_minutes=-1))

        assert exc_info.value.status_code == 401

    def test_token_without_subject(self) -> None:
        token = jwt.encode({"role": "owner"}, settings.SECRET_KEY, algorithm=ALGORITHM)

        with pytest.raises(HTTPException):
            member_id_from_token(token)

    def test_foreign_signature(self) -> None:
        token = jwt.encode({"sub": "member-1"}, "someone-else", algorithm=ALGORITHM)

        with pytest.raises(HTTPException):
            member_id_from_token(token)

    def test_session_cookie_is_http_only(self) -> None:
        response = Response()

        set_session_cookie(response, "member-1")

        header = response.headers["set-cookie"]
        assert header.startswith(f"{settings.SESSION_COOKIE_NAME}=")
        assert "HttpOnly" in header
