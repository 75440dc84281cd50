# volunteer_hub/engagement/guard.py
"""
In-flight submission guard.

A submit action is keyed by (actor, action). While one is pending, a second
submission of the same key is refused instead of being queued.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator

from .errors import DuplicateSubmission


class SubmissionGuard:
    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: set[tuple[Hashable, str]] = set()

    def is_in_flight(self, actor_key: Hashable, action: str) -> bool:
        with self._lock:
            return (actor_key, action) in self._in_flight

    @contextmanager
    def hold(self, actor_key: Hashable, action: str) -> Iterator[None]:
        key = (actor_key, action)
        with self._lock:
            if key in self._in_flight:
                raise DuplicateSubmission(action)
            self._in_flight.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(key)
