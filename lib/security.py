# =============================================================================
# lib/security.py - Password Hashing & Session Tokens
# =============================================================================
# - Passwords are hashed with passlib (pbkdf2_sha256).
# - A login session is an HS256 JWT signed with SECRET_KEY, carried in an
#   HTTP-only cookie.
# - Verification and reset tokens are opaque random strings stored in the
#   verification_tokens table (see UserService).
# =============================================================================

import secrets
from datetime import timedelta
from typing import Any

from jose import jwt
from passlib.context import CryptContext

from app.config import settings
from lib.utils import utcnow

ALGORITHM = "HS256"
TOKEN_AUDIENCE = "lumate-session"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def create_session_token(user_id: str, email: str, is_admin: bool = False) -> str:
    """
    Sign a session token.

    `adm` is informational only; admin checks always re-read the user row.
    """
    now = utcnow()
    payload: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "adm": is_admin,
        "aud": TOKEN_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=settings.SESSION_TTL_HOURS)).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jose.JWTError: If the signature, audience or expiry is invalid
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM], audience=TOKEN_AUDIENCE)


def generate_opaque_token() -> str:
    return secrets.token_urlsafe(32)
