"""Listener registry with explicit unsubscribe handles."""
from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``subscribe``; release it with ``unsubscribe()``."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class ListenerRegistry(Generic[T]):
    """Ordered set of callbacks notified with a single payload."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        self._listeners.append(listener)

        def release() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return Subscription(release)

    def notify(self, payload: T) -> None:
        # copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener %r failed", listener)

    def clear(self) -> None:
        self._listeners.clear()
