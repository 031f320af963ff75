"""
One-shot session messages shown on the next rendered page.
"""

from starlette.requests import Request

FLASH_KEY = "flash"


def put_flash(request: Request, message: str) -> None:
    request.session[FLASH_KEY] = message


def pop_flash(request: Request) -> str | None:
    """Return the pending flash message, if any, and clear it."""
    return request.session.pop(FLASH_KEY, None)
