"""Observable holder for the current logo URL.

Anything that renders the logo subscribes here instead of reading a global;
whoever changes the logo calls ``set``. The store knows nothing about where the
value is persisted.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[str | None], None]


class LogoStore:
    def __init__(self, initial: str | None = None) -> None:
        self._value = initial
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def get(self) -> str | None:
        return self._value

    def set(self, value: str | None) -> bool:
        """Store ``value`` and notify listeners. Returns False when nothing changed."""

        with self._lock:
            if value == self._value:
                return False
            self._value = value
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("Logo listener %r failed", listener)
        return True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; call the returned function to unsubscribe."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


logo_store = LogoStore()
