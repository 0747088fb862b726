"""SQLAlchemy models for the sql key-value store."""
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class KeyValueEntry(Base):
    """One stored key and its serialized text value."""
    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<KeyValueEntry(key={self.key}, updated_at={self.updated_at})>"
