"""
Domain entities.

Patterns used
-------------
- ``Sighting`` is a frozen value: built from the request, enriched with
  an image reference via ``with_image`` / ``with_id``, never mutated.
- **State Pattern** on ``NotificationMessage``: enforces the delivery
  lifecycle (QUEUED -> DELIVERING -> DELIVERED, or QUEUED -> DROPPED).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from .enums import NOTIFICATION_TRANSITIONS, NotificationStatus


class InvalidStateTransition(Exception):
    """Raised when a notification status change violates the state machine."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Sighting:
    user_id: int = 0
    tiger_id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    timestamp: Optional[datetime] = None
    image_path: str = ""
    id: Optional[int] = None

    def with_image(self, image_path: str) -> Sighting:
        return replace(self, image_path=image_path)

    def with_id(self, sighting_id: int) -> Sighting:
        return replace(self, id=sighting_id)


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class NotificationMessage:
    """One fan-out unit: every user in ``user_ids`` hears about ``tiger_id``."""

    tiger_id: int
    user_ids: tuple[int, ...]
    status: NotificationStatus = field(default=NotificationStatus.QUEUED)

    def transition_to(self, new_status: NotificationStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = NOTIFICATION_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status} to {new_status}"
            )
        self.status = new_status
