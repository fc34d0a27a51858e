#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Run Tracker API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps, both set on insert, updated_at bumped on every update

Notes:
- Timestamps are produced in Python (not server_default) so the values are
  available on the instance right after flush without a refresh round trip.
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    Persistence goes through DBStorage / the store classes, not the model.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        Both timestamps start equal; pass them explicitly to override (e.g. in tests).
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()
        now = utcnow()
        if getattr(self, "created_at", None) is None:
            self.created_at = now
        if getattr(self, "updated_at", None) is None:
            self.updated_at = self.created_at
