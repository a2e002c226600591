"""
SQLAlchemy ORM Models for the SRS Store

A single key-value table: each row holds one serialized collection.
"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StoreRecord(Base):
    """
    Durable record keyed by a fixed storage key.

    The value is the JSON-serialized card collection.
    """
    __tablename__ = 'srs_store'

    key = Column(String(255), primary_key=True, nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<StoreRecord({self.key}, {len(self.value or '')} chars)>"
