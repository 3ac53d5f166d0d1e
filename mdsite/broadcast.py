from __future__ import annotations

import queue
import threading

RELOAD = "reload"


class Broadcaster:
    """Fan out reload messages to every connected viewer.

    Each subscriber owns a single-slot queue. A publish that finds the slot
    still full skips that subscriber, so a stalled viewer never holds up the
    publisher or the others.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: set[queue.Queue[str]] = set()

    def subscribe(self) -> queue.Queue[str]:
        channel: queue.Queue[str] = queue.Queue(maxsize=1)
        with self._lock:
            self._subscribers.add(channel)
        return channel

    def unsubscribe(self, channel: queue.Queue[str]) -> None:
        with self._lock:
            self._subscribers.discard(channel)

    def publish(self, message: str = RELOAD) -> int:
        delivered = 0
        with self._lock:
            for channel in self._subscribers:
                try:
                    channel.put_nowait(message)
                except queue.Full:
                    continue
                delivered += 1
        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
