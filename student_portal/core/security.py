"""Bearer token and gateway signature helpers."""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import JWTError, jwt

from student_portal.core.config import get_settings

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=True)


def create_access_token(subject: str, **claims: Any) -> str:
    """Create signed access token.

    Tokens are normally issued by the identity provider; this helper mirrors its
    format for tooling and tests.
    """
    payload: dict[str, Any] = {
        "sub": subject,
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate JWT token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    """Return hex HMAC-SHA256 digest of message."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signature_matches(secret: str, message: bytes, signature: str | None) -> bool:
    """Constant-time comparison of a received signature with the expected one."""
    if not secret or not signature:
        return False
    return hmac.compare_digest(hmac_sha256_hex(secret, message), signature)
