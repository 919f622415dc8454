"""Key-value snapshot rows backing the persisted quiz state."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class Snapshot(Base, TimestampMixin):
    """A whole-state JSON blob stored under a logical key.

    Each write replaces the payload; ``data_version`` lets a schema bump
    ignore old blobs without deleting them.
    """

    __tablename__ = "snapshots"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)  # session-stats, level-progress, ...
    data_version: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
