"""Journal API endpoints."""

from dataclasses import dataclass, field
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from src.api.dependencies import get_current_identity, get_journal_service
from src.config import get_settings
from src.schemas.auth import MessageResponse
from src.schemas.journal import JournalCreate, JournalResponse, JournalUpdate
from src.services import errors
from src.services.auth import Identity
from src.services.journal_service import JournalService
from src.services.storage import ImageUpload

router = APIRouter(prefix="/api/journals", tags=["journals"])

settings = get_settings()

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass
class JournalForm:
    """Raw journal request body: text fields plus the optional image part."""

    fields: dict = field(default_factory=dict)
    image: ImageUpload | None = None


async def read_image(upload: UploadFile) -> ImageUpload | None:
    """Check type and size of an uploaded image and read it into memory."""
    try:
        if not upload.filename and not upload.size:
            # Empty file input
            return None

        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise errors.ValidationError("Only JPEG, PNG, GIF, and WebP images are allowed")

        too_large = errors.ValidationError(
            f"File too large. Maximum size is {settings.max_image_size_bytes // (1024 * 1024)}MB."
        )
        if upload.size is not None and upload.size > settings.max_image_size_bytes:
            raise too_large
        data = await upload.read()
        if len(data) > settings.max_image_size_bytes:
            raise too_large
    finally:
        await upload.close()

    return ImageUpload(
        filename=upload.filename or "",
        content_type=upload.content_type,
        data=data,
    )


async def read_journal_form(request: Request) -> JournalForm:
    """Read a multipart, urlencoded or JSON journal body.

    Form values are kept verbatim so an explicitly empty field stays
    distinguishable from a missing one.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise errors.ValidationError("Malformed JSON body") from None
        if not isinstance(body, dict):
            raise errors.ValidationError("Request body must be a JSON object")
        return JournalForm(fields=body)

    form = await request.form()
    journal_form = JournalForm()
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == "image" and journal_form.image is None:
                journal_form.image = await read_image(value)
            else:
                await value.close()
        else:
            journal_form.fields[key] = value
    return journal_form


def parse_fields(schema: type[SchemaT], fields: dict) -> SchemaT:
    try:
        return schema.model_validate(fields)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from None


@router.get("", response_model=list[JournalResponse])
async def get_journals(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[JournalService, Depends(get_journal_service)],
):
    """Get all journals of the current user, newest first."""
    return service.list_journals(identity.id)


@router.post("", response_model=JournalResponse, status_code=status.HTTP_201_CREATED)
async def create_journal(
    identity: Annotated[Identity, Depends(get_current_identity)],
    form: Annotated[JournalForm, Depends(read_journal_form)],
    service: Annotated[JournalService, Depends(get_journal_service)],
):
    """Create a journal entry with an optional image."""
    journal_data = parse_fields(JournalCreate, form.fields)
    return service.create_journal(identity.id, journal_data, form.image)


@router.put("/{journal_id}", response_model=JournalResponse)
async def update_journal(
    journal_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    form: Annotated[JournalForm, Depends(read_journal_form)],
    service: Annotated[JournalService, Depends(get_journal_service)],
):
    """Update a journal entry.

    Send a new ``image`` to replace the picture, ``currentImageUrl=""`` to
    remove it, or omit both to leave it as is.
    """
    journal_data = parse_fields(JournalUpdate, form.fields)
    return service.update_journal(identity.id, journal_id, journal_data, form.image)


@router.delete("/{journal_id}", response_model=MessageResponse)
async def delete_journal(
    journal_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[JournalService, Depends(get_journal_service)],
):
    """Delete a journal entry and its image."""
    service.delete_journal(identity.id, journal_id)
    return MessageResponse(message="Journal deleted successfully")
