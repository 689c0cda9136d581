from __future__ import annotations

import threading
from collections import defaultdict

from tableside.application.ports.publisher import EventPublisher


class InMemoryEventPublisher(EventPublisher):
    """Keeps every published message per channel.

    Nothing is ever evicted, so this suits tests and short-lived embedding,
    not long-running processes; plug in a real broker adapter for those.
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[str]] = defaultdict(list)
        self._lock = threading.Lock()

    def publish(self, channel: str, message: str) -> None:
        with self._lock:
            self._messages[channel].append(message)

    def messages(self, channel: str) -> list[str]:
        with self._lock:
            return list(self._messages.get(channel, []))
