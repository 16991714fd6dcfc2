#!/usr/bin/env python3
"""
Shared SQLAlchemy base for the Blog API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- save() and delete() that use DBStorage
- to_dict() that formats timestamps and removes SA internals
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
import models

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

TIME_FMT = "%Y-%m-%dT%H:%M:%S.%f"

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models.

    - id, created_at, updated_at
    - save(), delete() wired to DBStorage
    - to_dict() with timestamp formatting
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if user passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()
        if getattr(self, "created_at", None) is None:
            self.created_at = utcnow()
        if getattr(self, "updated_at", None) is None:
            self.updated_at = self.created_at

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"

    def save(self):
        """Update updated_at and persist the instance using DBStorage."""
        self.updated_at = utcnow()
        models.storage.new(self)
        models.storage.save()

    def delete(self):
        """
        Hard delete the current instance using DBStorage.
        Not committed here; caller decides when to commit.
        """
        models.storage.delete(self)

    def to_dict(self) -> dict:
        """
        Return a dictionary of column values:
        - Formats created_at / updated_at to TIME_FMT
        - Removes SQLAlchemy internal state and password hashes
        """
        d = {k: v for k, v in self.__dict__.items() if k != "_sa_instance_state"}
        for key in ("created_at", "updated_at"):
            if isinstance(d.get(key), datetime):
                d[key] = d[key].strftime(TIME_FMT)
        d.pop("password_hash", None)
        return d
