"""SQLAlchemy ORM models for the quiz database."""

from backend.models.base import Base
from backend.models.snapshot import Snapshot

__all__ = ["Base", "Snapshot"]
