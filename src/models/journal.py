"""Journal entry model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Journal(Base, TimestampMixin):
    """A journal entry with optional image, owned by a single user."""

    __tablename__ = "journals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(1024), nullable=True)  # public URL in the blob store

    # Relationships
    user = relationship("User", back_populates="journals")
