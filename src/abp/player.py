"""Player controller used when no audio backend is attached (CLI, API)."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingPlayerController:
    """Records play requests instead of producing audio."""

    def __init__(self) -> None:
        self.play_requests = 0

    def play(self) -> None:
        self.play_requests += 1
        logger.info("Play requested (%d)", self.play_requests)
