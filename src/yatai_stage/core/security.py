"""JWT helpers shared by the viewer resolver and tooling.

Tokens are minted by the external auth service; ``create_access_token``
exists so scripts and tests can produce cookies that this service accepts.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from yatai_stage.core.settings import settings


def create_access_token(subject: str) -> str:
    """Create a signed access token whose ``sub`` is the user id."""
    to_encode: dict[str, object] = {"sub": subject}
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_subject(token: str) -> str | None:
    """Return the ``sub`` claim of a valid token, or None.

    Expired, malformed and wrongly signed tokens all yield None.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject
