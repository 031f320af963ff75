"""
HTTP handlers for viewing, creating, editing and deleting contacts.

All forms are plain HTML forms, so edits and deletions are POSTs.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from contactbook.contacts.forms import ContactForm, decode_contact_form
from contactbook.contacts.repository import (
    ContactRepository,
    ContactRepositoryProtocol,
)
from contactbook.shared.csrf import csrf_protect
from contactbook.shared.database import get_db_session
from contactbook.shared.exceptions import (
    EditConflictError,
    NotFoundError,
    ValidationError,
)
from contactbook.shared.flash import put_flash
from contactbook.shared.logging import get_logger
from contactbook.shared.templates import render

logger = get_logger(__name__)

router = APIRouter(
    prefix="/contacts",
    tags=["contacts"],
    dependencies=[Depends(csrf_protect)],
    include_in_schema=False,
)

CREATED_FLASH = "Contact successfully created!"
UPDATED_FLASH = "Contact successfully updated!"
DELETED_FLASH = "Contact successfully deleted!"
CONFLICT_FLASH = "Another user has updated this contact. Please reload and try again."


def get_contact_repository(
    session: Annotated[AsyncSession, Depends(get_db_session, scope="function")],
) -> ContactRepository:
    """Dependency for contact repository."""
    return ContactRepository(session=session)


Repository = Annotated[
    ContactRepositoryProtocol,
    Depends(get_contact_repository, scope="function"),
]


def parse_contact_id(raw: str) -> int:
    """Parse a path ID; anything but a positive integer is a 404."""
    try:
        contact_id = int(raw)
    except ValueError:
        raise NotFoundError(details={"contact_id": raw}) from None
    if contact_id < 1:
        raise NotFoundError(details={"contact_id": raw})
    return contact_id


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/view/{contact_id}", response_class=HTMLResponse)
async def contact_view(request: Request, contact_id: str, repository: Repository) -> HTMLResponse:
    """Show a single contact."""
    contact = await repository.get(parse_contact_id(contact_id))
    return render(request, "pages/view.html", contact=contact)


@router.get("/create", response_class=HTMLResponse)
async def contact_create(request: Request) -> HTMLResponse:
    return render(request, "pages/create.html", form=ContactForm())


@router.post("/create")
async def contact_create_post(request: Request, repository: Repository) -> Response:
    """Insert a new contact and redirect to its page.

    Invalid submissions re-render the form with a 422 and the field errors.
    """
    form = decode_contact_form(await request.form())
    try:
        form.validate()
    except ValidationError:
        return render(
            request,
            "pages/create.html",
            status_code=422,
            form=form,
        )

    contact_id = await repository.insert(form.first, form.last, form.phone, form.email)

    put_flash(request, CREATED_FLASH)
    return _see_other(f"/contacts/view/{contact_id}")


@router.get("/edit/{contact_id}", response_class=HTMLResponse)
async def contact_edit(request: Request, contact_id: str, repository: Repository) -> HTMLResponse:
    """Show the edit form filled in with the stored values and version."""
    contact = await repository.get(parse_contact_id(contact_id))
    return render(
        request,
        "pages/edit.html",
        contact=contact,
        form=ContactForm.from_contact(contact),
    )


@router.post("/edit/{contact_id}")
async def contact_edit_post(request: Request, contact_id: str, repository: Repository) -> Response:
    """Update a contact, guarding against concurrent edits.

    The form carries the version the user started from. If somebody else saved
    in the meantime the user is sent back to the edit page with a message
    rather than overwriting their changes.
    """
    existing = await repository.get(parse_contact_id(contact_id))

    form = decode_contact_form(await request.form())
    form.id = existing.id
    try:
        form.validate()
    except ValidationError:
        return render(
            request,
            "pages/edit.html",
            status_code=422,
            contact=existing,
            form=form,
        )

    try:
        version = await repository.update(form.to_contact())
    except EditConflictError:
        put_flash(request, CONFLICT_FLASH)
        return _see_other(f"/contacts/edit/{form.id}")

    logger.info("Contact updated", extra={"contact_id": form.id, "version": version})
    put_flash(request, UPDATED_FLASH)
    return _see_other(f"/contacts/view/{form.id}")


@router.get("/delete/{contact_id}", response_class=HTMLResponse)
async def contact_delete(request: Request, contact_id: str, repository: Repository) -> HTMLResponse:
    """Show the contact with a confirmation form."""
    contact = await repository.get(parse_contact_id(contact_id))
    return render(request, "pages/view.html", contact=contact, delete_form=True)


@router.post("/delete/{contact_id}")
async def contact_delete_post(request: Request, contact_id: str, repository: Repository) -> Response:
    await repository.delete(parse_contact_id(contact_id))

    put_flash(request, DELETED_FLASH)
    return _see_other("/")
