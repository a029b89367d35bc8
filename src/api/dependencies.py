"""FastAPI dependencies for authentication, database and storage."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.services import errors
from src.services.auth import AuthService, Identity, identity_from_token
from src.services.journal_service import JournalService
from src.services.storage import BlobStore, get_blob_store

# Missing or malformed headers are reported by get_current_identity
security = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity:
    """Verify the bearer token and attach the caller's identity to the request."""
    if credentials is None or not credentials.credentials:
        raise errors.UnauthorizedError("Authentication required")

    identity = identity_from_token(credentials.credentials)
    request.state.identity = identity
    return identity


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db)


def get_journal_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[BlobStore, Depends(get_blob_store)],
) -> JournalService:
    """Get journal service with dependencies."""
    return JournalService(db, storage)
