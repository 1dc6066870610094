"""Editing/Ready mode switch and the single-flight delivery guard."""

from __future__ import annotations

import logging
import time
from enum import Enum

from askuser.exceptions import DeliveryError
from askuser.io import ResponseSink
from askuser.log import log_delivery

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    EDITING = "editing"
    READY = "ready"


class ViewController:
    def __init__(self) -> None:
        self.mode = ViewMode.EDITING
        self.submitting = False
        self.last_error: DeliveryError | None = None
        self._generation = 0

    @property
    def editing(self) -> bool:
        return self.mode is ViewMode.EDITING

    def reset(self) -> None:
        """A new question batch: back to Editing, any pending delivery goes stale."""
        self.mode = ViewMode.EDITING
        self.submitting = False
        self.last_error = None
        self._generation += 1

    def edit(self) -> bool:
        if self.mode is not ViewMode.READY:
            return False
        self.mode = ViewMode.EDITING
        return True

    async def deliver(self, sink: ResponseSink, text: str, batch_size: int = 0) -> bool:
        """Send ``text`` and switch to Ready on success.

        Returns False without calling the sink when already Ready or while
        another delivery is pending. A failing sink leaves the mode Editing
        and records the failure in ``last_error``.
        """
        if self.mode is ViewMode.READY or self.submitting:
            logger.debug("deliver skipped (mode=%s, submitting=%s)", self.mode.value, self.submitting)
            return False

        generation = self._generation
        self.submitting = True
        self.last_error = None
        start = time.monotonic()
        try:
            await sink.deliver_response(text)
        except Exception as e:
            log_delivery(batch_size, time.monotonic() - start, ok=False, error=e)
            if generation == self._generation:
                self.last_error = DeliveryError(f"Failed to send response: {e}")
                self.submitting = False
            return False

        log_delivery(batch_size, time.monotonic() - start, ok=True)
        if generation != self._generation:
            # questions were replaced while this delivery was in flight
            return False
        self.submitting = False
        self.mode = ViewMode.READY
        return True
