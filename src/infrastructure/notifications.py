"""Delivery transports for sighting notifications."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """
    Placeholder transport: records each delivery in the log.

    Swap for an email / push client in deployments that deliver for real;
    anything satisfying ``src.domain.ports.Notifier`` works.
    """

    async def notify(self, user_id: int, tiger_id: int) -> None:
        logger.info("Sending email to user %d about tiger %d", user_id, tiger_id)
