"""Viewer context resolution from the session cookie."""

from __future__ import annotations

import logging

from starlette.requests import HTTPConnection

from yatai_stage.core.security import decode_subject
from yatai_stage.core.settings import settings

logger = logging.getLogger(__name__)

ANONYMOUS = ""


def resolve_viewer(connection: HTTPConnection) -> str:
    """Return the viewer's user id, or ``ANONYMOUS``.

    Never raises: a missing, expired or tampered cookie is an anonymous
    viewer, not an error.
    """
    token = connection.cookies.get(settings.access_token_cookie_name)
    if not token:
        return ANONYMOUS
    subject = decode_subject(token)
    if subject is None:
        logger.debug("Ignoring invalid session cookie")
        return ANONYMOUS
    return subject
