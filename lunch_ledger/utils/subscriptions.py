"""Minimal observer list used for push-style state updates"""

import logging
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class Subscription:
    """Handle returned by Subscribers.subscribe; unsubscribing twice is a no-op"""

    def __init__(self, release: Callable[[], None]):
        self._release = release
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._release()

    __call__ = unsubscribe


class Subscribers(Generic[T]):
    """Callback list that delivers every published value to each listener"""

    def __init__(self, topic: str):
        self.topic = topic
        self._callbacks: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        self._callbacks.append(callback)

        def release() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return Subscription(release)

    def publish(self, value: T) -> None:
        # Iterate over a copy so callbacks may unsubscribe while being notified
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logging.exception(
                    "Subscriber callback failed",
                    extra={"topic": self.topic, "callback": getattr(callback, "__qualname__", repr(callback))},
                )

    def __len__(self) -> int:
        return len(self._callbacks)
