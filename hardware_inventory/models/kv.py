from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class KeyValue(Base):
    """One opaque blob per key; the inventory lives under a single row."""

    __tablename__ = "kv_store"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
