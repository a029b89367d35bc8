"""SQLAlchemy models."""

from src.models.journal import Journal
from src.models.user import User

__all__ = [
    "User",
    "Journal",
]
