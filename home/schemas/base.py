"""Shared base for the immutable domain entities."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from uuid_extensions import uuid7str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel):
    """
    Frozen record shared by every entity in a snapshot.

    `version` starts at 1 and is bumped by `touch`; storage backends use it
    as the compare-and-swap token when committing an update.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=uuid7str)
    version: int = 1
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def touch(self, now: datetime, **changes: Any):
        """Return a copy with `changes` applied, the version bumped and updated_at set."""
        return self.model_copy(
            update={**changes, "version": self.version + 1, "updated_at": now}
        )
