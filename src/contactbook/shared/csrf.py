"""
Session-bound CSRF tokens.

Each session carries one random token. Templates embed it in every form as a
hidden ``csrf_token`` field and ``csrf_protect`` rejects unsafe requests that
do not echo it back.
"""

import secrets

from starlette.requests import Request

from contactbook.shared.exceptions import CSRFError
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)

CSRF_SESSION_KEY = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def get_csrf_token(request: Request) -> str:
    """Return the session's CSRF token, issuing one if needed."""
    token = request.session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        request.session[CSRF_SESSION_KEY] = token
    return token


async def csrf_protect(request: Request) -> None:
    """Router dependency verifying the CSRF token on unsafe methods.

    Raises:
        CSRFError: If the submitted token is missing or does not match.
    """
    if request.method in SAFE_METHODS:
        return

    expected = request.session.get(CSRF_SESSION_KEY)
    submitted = request.headers.get(CSRF_HEADER)
    if submitted is None:
        form = await request.form()
        submitted = form.get(CSRF_FORM_FIELD)

    if (
        not expected
        or not isinstance(submitted, str)
        or not secrets.compare_digest(submitted.encode(), expected.encode())
    ):
        logger.warning(
            "CSRF token rejected",
            extra={"method": request.method, "uri": request.url.path},
        )
        raise CSRFError()
