"""Journal service: owner-scoped CRUD with image attachment lifecycle."""

import logging
import time
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.journal import Journal
from src.schemas.journal import ImageUrlAction, JournalCreate, JournalUpdate
from src.services import errors
from src.services.storage import BlobStore, ImageUpload

logger = logging.getLogger(__name__)

settings = get_settings()


class JournalService:
    """Service for journal entries belonging to a single user."""

    def __init__(self, db: Session, storage: BlobStore):
        self.db = db
        self.storage = storage

    def list_journals(self, user_id: int) -> list[Journal]:
        """All journals owned by the user, newest first."""
        return (
            self.db.query(Journal)
            .filter(Journal.user_id == user_id)
            .order_by(Journal.created_at.desc(), Journal.id.desc())
            .all()
        )

    def create_journal(
        self, user_id: int, data: JournalCreate, image: ImageUpload | None = None
    ) -> Journal:
        """Create a journal, uploading its image first.

        A failed upload raises StorageError and no row is written.
        """
        image_url = self._store_image(user_id, image) if image is not None else None

        journal = Journal(
            user_id=user_id,
            title=data.title,
            content=data.content,
            image_url=image_url,
        )
        self.db.add(journal)
        self.db.commit()
        self.db.refresh(journal)
        return journal

    def update_journal(
        self,
        user_id: int,
        journal_id: int,
        data: JournalUpdate,
        image: ImageUpload | None = None,
    ) -> Journal:
        """Update title, content and image of an owned journal.

        With a new image the stored blob is replaced. Without one,
        ``data.image_url_action`` decides whether the image is kept,
        removed, or set to the URL the caller sent back.
        """
        journal = self._get_owned(user_id, journal_id)
        stored_url = journal.image_url
        stale_url = None

        if image is not None:
            image_url = self._store_image(user_id, image)
            stale_url = stored_url
        else:
            action = data.image_url_action
            if action == ImageUrlAction.REMOVE:
                image_url = None
                stale_url = stored_url
            elif action == ImageUrlAction.KEEP:
                image_url = data.current_image_url
            else:
                image_url = stored_url

        updated = (
            self.db.query(Journal)
            .filter(Journal.id == journal_id, Journal.user_id == user_id)
            .update(
                {
                    Journal.title: data.title,
                    Journal.content: data.content,
                    Journal.image_url: image_url,
                    Journal.updated_at: datetime.now(UTC),
                },
                synchronize_session="fetch",
            )
        )
        if not updated:
            self.db.rollback()
            if image is not None:
                self._discard_image(user_id, image_url)
            raise errors.NotFoundError("Journal not found")

        self.db.commit()
        self.db.refresh(journal)

        if stale_url and stale_url != image_url:
            self._discard_image(user_id, stale_url)
        return journal

    def delete_journal(self, user_id: int, journal_id: int) -> None:
        """Delete an owned journal and, best-effort, its image."""
        journal = self._get_owned(user_id, journal_id)

        if journal.image_url:
            self._discard_image(user_id, journal.image_url)

        self.db.query(Journal).filter(
            Journal.id == journal_id, Journal.user_id == user_id
        ).delete(synchronize_session="fetch")
        self.db.commit()

    def _get_owned(self, user_id: int, journal_id: int) -> Journal:
        journal = (
            self.db.query(Journal)
            .filter(Journal.id == journal_id, Journal.user_id == user_id)
            .first()
        )
        if journal is None:
            raise errors.NotFoundError("Journal not found")
        return journal

    def _store_image(self, user_id: int, image: ImageUpload) -> str:
        filename = f"{user_id}-{int(time.time() * 1000)}.{image.extension}"
        path = f"{settings.storage_prefix}/{filename}"
        return self.storage.upload(path, image.data, image.content_type)

    def _discard_image(self, user_id: int, image_url: str) -> None:
        """Best-effort delete of one of the user's own blobs.

        Failures are logged, never raised. URLs outside the store or under
        another user's path are skipped.
        """
        path = self.storage.path_from_url(image_url)
        if path is None or not path.startswith(f"{settings.storage_prefix}/{user_id}-"):
            logger.info(f"Not deleting image not owned by user {user_id}: {image_url}")
            return
        try:
            self.storage.delete(path)
        except errors.StorageError as e:
            logger.warning(f"Failed to delete old image {path}: {e}")
