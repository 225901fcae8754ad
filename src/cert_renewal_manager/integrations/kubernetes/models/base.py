"""Base models for Kubernetes resource display."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class K8sEntityBase(BaseModel):
    """Base class for Kubernetes resource models built from API dicts."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    creation_timestamp: str | None = Field(default=None, description="Creation time")
    labels: dict[str, str] | None = Field(default=None, description="Resource labels")
    annotations: dict[str, str] | None = Field(default=None, description="Resource annotations")

    _entity_name: ClassVar[str] = "entity"

    @property
    def age(self) -> str:
        """Human-readable age string."""
        return format_age(self.creation_timestamp)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a Kubernetes RFC 3339 timestamp, returning None if unparseable."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def format_age(timestamp: str | None, now: datetime | None = None) -> str:
    """Render the time since ``timestamp`` the way kubectl does (5d, 3h, 12m)."""
    created = parse_timestamp(timestamp)
    if created is None:
        return "Unknown"
    delta = (now or datetime.now(UTC)) - created
    days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes = remainder // 60
    if days > 0:
        return f"{days}d"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"
