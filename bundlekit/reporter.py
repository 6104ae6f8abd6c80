"""Progress notifications for build and bundle passes."""

from __future__ import annotations

import logging

logger = logging.getLogger("bundlekit")


class ProgressReporter:
    """Presentation-only start/done/info notifications backed by logging."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def log_start(self, msg: str) -> None:
        self.log.info(f"⏩ START: {msg}")

    def log_done(self, msg: str) -> None:
        self.log.info(f"✅ DONE: {msg}")

    def log_info(self, msg: str) -> None:
        self.log.info(f"ℹ️  {msg}")
