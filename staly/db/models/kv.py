"""
Key-value table holding whole-collection JSON blobs.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from staly.db.database import Base


class KeyValueModel(Base):
    """
    One persisted collection per row.

    Keys follow the collection names: ``current-session``,
    ``email-accounts``, ``external-accounts``, ``profiles`` and
    ``stays:<userId>``. Values are rewritten in full on every save.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
