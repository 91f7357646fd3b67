"""
Current-value broadcast used for session change notifications.
"""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ValueStream.subscribe; cancel() stops delivery."""

    def __init__(self, stream: "ValueStream", token: int):
        self._stream = stream
        self._token = token
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._stream._remove(self._token)


class ValueStream(Generic[T]):
    """
    In-process broadcast of a single current value.

    New subscribers immediately receive the latest value, then every
    subsequent change until their subscription is cancelled.

    Usage:
        stream = ValueStream(None)
        subscription = stream.subscribe(lambda user: print(user))
        stream.send(user)
        subscription.cancel()
    """

    def __init__(self, value: T):
        self._value = value
        self._observers: dict[int, Callable[[T], None]] = {}
        self._next_token = 0

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: Callable[[T], None]) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._observers[token] = observer
        observer(self._value)
        return Subscription(self, token)

    def send(self, value: T) -> None:
        self._value = value
        # Copy: observers may cancel while being notified
        for observer in list(self._observers.values()):
            observer(value)

    def _remove(self, token: int) -> None:
        self._observers.pop(token, None)
        logger.debug(f"Subscription {token} cancelled")
