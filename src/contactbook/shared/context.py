"""
Application-wide dependencies, built once per application instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request
from fastapi.templating import Jinja2Templates

from contactbook.config import Settings
from contactbook.shared.database import DatabaseManager
from contactbook.shared.logging import get_logger
from contactbook.shared.templates import create_templates


@dataclass
class AppContext:
    """Handles shared by every request handler."""

    settings: Settings
    db: DatabaseManager
    templates: Jinja2Templates
    logger: logging.Logger

    @classmethod
    def build(cls, settings: Settings, db: DatabaseManager | None = None) -> AppContext:
        return cls(
            settings=settings,
            db=db or DatabaseManager(settings),
            templates=create_templates(),
            logger=get_logger("contactbook"),
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application context."""
    return request.app.state.context
