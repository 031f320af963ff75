"""
Home, about and liveness handlers.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from contactbook.contacts.repository import ContactRepositoryProtocol
from contactbook.contacts.router import get_contact_repository
from contactbook.shared.csrf import csrf_protect
from contactbook.shared.templates import render

router = APIRouter(
    tags=["pages"],
    dependencies=[Depends(csrf_protect)],
    include_in_schema=False,
)


async def ping() -> PlainTextResponse:
    return PlainTextResponse("OK")


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    repository: Annotated[
        ContactRepositoryProtocol,
        Depends(get_contact_repository, scope="function"),
    ],
) -> HTMLResponse:
    """List every contact."""
    contacts = await repository.list_all()
    return render(request, "pages/home.html", contacts=contacts)


@router.get("/about", response_class=HTMLResponse)
async def about(request: Request) -> HTMLResponse:
    return render(request, "pages/about.html")
