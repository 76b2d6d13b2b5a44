"""
Minimal reactive primitives: event streams and memoizing cells.

Listeners are called outside of the internal lock, in subscription order.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class Stream(Generic[T]):
    """
    Push-based event channel with no memory of past events.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    def listen(self, fn: Listener) -> Callable[[], None]:
        """
        Register ``fn`` and return a callable that unregisters it.
        """
        with self._lock:
            self._listeners.append(fn)

        def _unsub():
            with self._lock:
                try:
                    self._listeners.remove(fn)
                except ValueError:
                    pass

        return _unsub

    def send(self, value: T) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for fn in listeners:
            fn(value)


class Cell(Stream[T]):
    """
    Holds an always-available last value and notifies listeners when it changes.
    """

    def __init__(self, initial: T) -> None:
        super().__init__()
        self._value = initial

    def sample(self) -> T:
        with self._lock:
            return self._value

    def send(self, value: T, force: bool = False) -> None:
        """
        Store ``value`` and notify; equal values are dropped unless ``force``.
        """
        with self._lock:
            if not force and value == self._value:
                return
            self._value = value
            listeners = list(self._listeners)
        for fn in listeners:
            fn(value)
