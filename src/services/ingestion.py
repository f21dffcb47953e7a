"""
Sighting Ingestion
==================

End-to-end flow for one inbound sighting:

1. Validate (first failing rule -> ``SightingRejected``, no side effects).
2. Store the image, keep the returned reference.
3. Under the per-tiger lock:
   a. fetch the last sighting (absent = first sighting, gate passes);
   b. proximity gate -- closer than 5 km -> ``TOO_CLOSE_TO_PREVIOUS_SIGHTING``;
   c. if a prior sighting exists, collect earlier observers minus the
      reporter;
   d. update the tiger's last-seen position;
   e. persist the sighting.
4. Enqueue one ``NotificationMessage`` when anyone is left to notify.

Consistency
-----------
(d) and (e) are separate repository calls.  If (d) succeeds and (e)
fails, the tiger's last-seen position points at a sighting that was
never stored.  This is logged as a consistency warning and left for
operators to reconcile; nothing is rolled back.

Notification problems (queue full, queue closed, enqueue error) are logged and never
change the outcome of the request.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Optional, TypeVar

from src.domain.entities import NotificationMessage, Sighting
from src.domain.enums import ErrorCode, Verdict
from src.domain.errors import (
    DependencyFailure,
    DispatcherClosed,
    LockUnavailable,
    SightingRejected,
)
from src.domain.ports import ImageStore, NotificationSink, SightingRepository
from src.domain.proximity import MIN_SIGHTING_DISTANCE_KM, admit
from src.domain.validation import validate_sighting
from src.infrastructure.locks import NullSubjectLocks, SubjectLocks

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SightingIngestionService:
    def __init__(
        self,
        repository: SightingRepository,
        image_store: ImageStore,
        notifications: NotificationSink,
        locks: Optional[SubjectLocks] = None,
    ):
        self.repository = repository
        self.image_store = image_store
        self.notifications = notifications
        self.locks = locks if locks is not None else NullSubjectLocks()

    async def ingest(self, raw: Sighting, image: bytes, image_ext: str) -> Sighting:
        """Accept and persist *raw*, or raise ``SightingRejected`` / ``DependencyFailure``."""
        rejection = validate_sighting(raw)
        if rejection is not None:
            logger.info(
                "Rejected sighting of tiger %d by user %d: %s",
                raw.tiger_id, raw.user_id, rejection.code.value,
            )
            raise rejection

        image_path = await self._call(
            "store_image", raw.tiger_id, self.image_store.store(image, image_ext)
        )
        sighting = raw.with_image(image_path)

        try:
            async with self.locks.hold(sighting.tiger_id):
                saved, recipients = await self._record(sighting)
        except LockUnavailable as exc:
            logger.error("Could not lock tiger %d for ingestion", sighting.tiger_id)
            raise DependencyFailure("acquire_lock", sighting.tiger_id) from exc

        if recipients:
            await self._notify(
                NotificationMessage(saved.tiger_id, tuple(sorted(recipients)))
            )
        return saved

    # ── Internals ─────────────────────────────────────────────────────

    async def _record(self, sighting: Sighting) -> tuple[Sighting, set[int]]:
        tiger_id = sighting.tiger_id
        last = await self._call(
            "get_last_sighting", tiger_id, self.repository.get_last_sighting(tiger_id)
        )

        if admit(last, sighting) is Verdict.REJECT:
            logger.info(
                "Rejected sighting of tiger %d by user %d: too close to sighting %s",
                tiger_id, sighting.user_id, last.id if last else None,
            )
            raise SightingRejected(
                ErrorCode.TOO_CLOSE_TO_PREVIOUS_SIGHTING,
                "New sighting is too close to the last sighting. Sightings must "
                f"be at least {MIN_SIGHTING_DISTANCE_KM:g} kilometers apart.",
            )

        recipients: set[int] = set()
        if last is not None:
            observers = await self._call(
                "list_observers", tiger_id, self.repository.list_observers(tiger_id)
            )
            recipients = set(observers) - {sighting.user_id}

        await self._call(
            "update_last_seen",
            tiger_id,
            self.repository.update_last_seen(
                tiger_id, sighting.timestamp, sighting.lat, sighting.lon
            ),
        )

        try:
            saved = await self.repository.save_sighting(sighting)
        except Exception as exc:
            logger.warning(
                "Consistency gap: tiger %d last-seen moved to (%s, %s) at %s "
                "but the sighting row was not saved; reconcile manually",
                tiger_id, sighting.lat, sighting.lon, sighting.timestamp.isoformat(),
                exc_info=True,
            )
            raise DependencyFailure("save_sighting", tiger_id) from exc

        logger.info(
            "Recorded sighting %s of tiger %d by user %d",
            saved.id, tiger_id, saved.user_id,
        )
        return saved, recipients

    async def _notify(self, message: NotificationMessage) -> None:
        try:
            await self.notifications.enqueue(message)
        except DispatcherClosed:
            logger.warning(
                "Notification for tiger %d not queued: dispatcher is shutting down",
                message.tiger_id,
            )
        except Exception:
            logger.exception(
                "Failed to queue notification for tiger %d", message.tiger_id
            )

    @staticmethod
    async def _call(operation: str, tiger_id: int, pending: Awaitable[T]) -> T:
        try:
            return await pending
        except Exception as exc:
            logger.exception("%s failed for tiger %d", operation, tiger_id)
            raise DependencyFailure(operation, tiger_id) from exc
