"""Progress reporting for long-running rule evaluation."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ProgressMonitor:
    """Receives progress events.  Every method is a no-op by default."""

    def begin_task(self, label: str, total_work: int) -> None:
        """Start a task with *total_work* units."""

    def sub_task(self, label: str) -> None:
        """Announce the next step of the current task."""

    def worked(self, amount: int) -> None:
        """Record *amount* units of completed work."""

    def done(self) -> None:
        """Finish the current task."""


class LoggingProgressMonitor(ProgressMonitor):
    """Reports progress events through ``logging`` at DEBUG level."""

    def __init__(self) -> None:
        self.total_work = 0
        self.completed = 0

    def begin_task(self, label: str, total_work: int) -> None:
        self.total_work = total_work
        self.completed = 0
        logger.debug("%s (%d step(s))", label, total_work)

    def sub_task(self, label: str) -> None:
        logger.debug("  %s", label)

    def worked(self, amount: int) -> None:
        self.completed += amount
        logger.debug("  %d/%d done", self.completed, self.total_work)

    def done(self) -> None:
        logger.debug("Finished after %d/%d step(s)", self.completed, self.total_work)
