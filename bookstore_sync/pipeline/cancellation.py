"""Cooperative cancellation shared by the pipeline stages."""

from __future__ import annotations

import time
from threading import Event

from ..errors import ImportCancelled


class CancellationToken:
    """Flag plus optional deadline checked between stages and chunks."""

    def __init__(self, timeout: float | None = None) -> None:
        self._event = Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, stage: str) -> None:
        if self._event.is_set():
            raise ImportCancelled(f"Import cancelled during {stage}", stage=stage)
        if self.expired:
            raise ImportCancelled(f"Import deadline exceeded during {stage}", stage=stage)


__all__ = ["CancellationToken"]
