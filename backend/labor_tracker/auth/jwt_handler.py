"""
Access tokens and password hashing for labor tracker users.

A token names the user (``sub``) and the tenant whose employees, projects and
time entries the bearer may book against. Decoding turns the payload into
``TokenClaims``; anything unreadable comes back as ``None`` so callers answer
with a single 401.
"""
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

# Configuration
SECRET_KEY = os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

TOKEN_TYPE_ACCESS = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a valid access token. ``tenant_id`` may be absent."""

    user_id: UUID
    tenant_id: Optional[UUID]
    email: Optional[str]
    role: Optional[str]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _optional_uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


def encode_token(payload: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``payload`` with an expiry, one day out unless ``expires_delta`` says otherwise."""
    to_encode = dict(payload)
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def issue_access_token(user_id: UUID, tenant_id: UUID, email: str, role: str) -> str:
    return encode_token({
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "email": email,
        "role": role,
        "type": TOKEN_TYPE_ACCESS
    })


def decode_access_token(token: str) -> Optional[TokenClaims]:
    """
    Verify ``token`` and read its claims.

    Returns ``None`` for a bad signature, an expired token, a token of another
    type, or a subject or tenant id that is not a UUID.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != TOKEN_TYPE_ACCESS:
        return None

    try:
        user_id = _optional_uuid(payload.get("sub"))
        tenant_id = _optional_uuid(payload.get("tenant_id"))
    except ValueError:
        return None
    if user_id is None:
        return None

    return TokenClaims(
        user_id=user_id,
        tenant_id=tenant_id,
        email=payload.get("email"),
        role=payload.get("role")
    )
