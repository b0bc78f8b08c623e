"""Replayable output channels.

A channel remembers the last value published on it. Subscribing hands the
subscriber that value right away (when there is one) and every later value
after it. Channels never close.
"""
import asyncio
from typing import Callable, Generic, List, Set, TypeVar

from wildcam_tv.application.messagebus import dispatch, handler_name
from wildcam_tv.common.logger import setup_logger

logger = setup_logger("ReplayChannel")

T = TypeVar("T")

_UNSET = object()


class ReplayChannel(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._value = _UNSET
        self._subscribers: List[Callable[[T], None]] = []
        self._tasks: Set[asyncio.Task] = set()

    @property
    def has_value(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            raise LookupError(f"Nothing published on channel '{self.name}' yet")
        return self._value

    def publish(self, value: T) -> None:
        self._value = value
        for subscriber in list(self._subscribers):
            self._deliver(subscriber, value)

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[], None]:
        """Register a handler; returns a callable that removes it again."""
        self._subscribers.append(handler)
        if self.has_value:
            self._deliver(handler, self._value)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def view(self) -> "ChannelView[T]":
        return ChannelView(self)

    def _deliver(self, handler: Callable[[T], None], value: T) -> None:
        try:
            dispatch(handler, value, self._tasks)
        except Exception as e:
            logger.error(f"Error in subscriber {handler_name(handler)} on '{self.name}': {e}")


class ChannelView(Generic[T]):
    """Read-only face of a ReplayChannel."""

    def __init__(self, channel: ReplayChannel[T]):
        self._channel = channel

    @property
    def name(self) -> str:
        return self._channel.name

    @property
    def has_value(self) -> bool:
        return self._channel.has_value

    @property
    def value(self) -> T:
        return self._channel.value

    def subscribe(self, handler: Callable[[T], None]) -> Callable[[], None]:
        return self._channel.subscribe(handler)
