"""Journal schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ImageUrlAction(str, Enum):
    """What an update does to the stored image URL when no new image is uploaded."""

    UNCHANGED = "unchanged"  # currentImageUrl absent
    REMOVE = "remove"  # currentImageUrl present and empty
    KEEP = "keep"  # currentImageUrl present with a value


class JournalCreate(BaseModel):
    """Create a journal entry."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class JournalUpdate(BaseModel):
    """Update a journal entry.

    ``current_image_url`` is tri-state: absent, explicitly empty, or a URL.
    Presence is read from ``model_fields_set`` rather than the value itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    current_image_url: str | None = Field(None, alias="currentImageUrl", max_length=1024)

    @property
    def image_url_action(self) -> ImageUrlAction:
        if "current_image_url" not in self.model_fields_set:
            return ImageUrlAction.UNCHANGED
        if not self.current_image_url:
            return ImageUrlAction.REMOVE
        return ImageUrlAction.KEEP


class JournalResponse(BaseModel):
    """Journal entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    content: str
    image_url: str | None
    created_at: datetime
    updated_at: datetime
