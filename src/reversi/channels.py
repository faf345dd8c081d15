"""
Outbound notification channels of the engine.

The engine publishes from its worker thread; subscribers drain their own queue from whatever thread they like.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.core.shared_types import Disk
from src.reversi.coordinate import Coordinate

T = TypeVar("T")


@dataclass(frozen=True)
class DisksChanged:
    """The placed coordinate comes first, followed by the flipped ones."""

    disk: Disk
    coordinates: list[Coordinate]


@dataclass(frozen=True)
class ThinkingChanged:
    side: Disk
    thinking: bool


class Subscription(Generic[T]):
    """The receiving end of a channel."""

    def __init__(self, channel: "Channel[T]") -> None:
        self._channel = channel
        self._queue: queue.Queue[T] = queue.Queue()

    def put(self, value: T) -> None:
        self._queue.put(value)

    def get(self, timeout: Optional[float] = None) -> T:
        """Block until the next value arrives. Raises queue.Empty after `timeout` seconds."""
        return self._queue.get(timeout=timeout)

    def drain(self) -> list[T]:
        """Everything that has been published so far, without waiting"""
        values: list[T] = []
        while True:
            try:
                values.append(self._queue.get_nowait())
            except queue.Empty:
                return values

    def close(self) -> None:
        self._channel.unsubscribe(self)


class Channel(Generic[T]):
    def __init__(self) -> None:
        self._subscriptions: list[Subscription[T]] = []
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, value: T) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.put(value)


class ValueChannel(Channel[T]):
    """A channel that remembers its latest value. New subscribers receive that value first."""

    def __init__(self, initial: T) -> None:
        super().__init__()
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self)
        with self._lock:
            subscription.put(self._value)
            self._subscriptions.append(subscription)
        return subscription

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.put(value)
