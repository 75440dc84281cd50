"""
In-process publish/subscribe feed for event chat messages.

Each subscriber gets its own bounded queue; publishing never blocks on a slow
reader. When a queue is full the oldest message is dropped.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict

from volunteer_hub.engagement import ChatMessageRecord

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class Subscription:
    """A single reader of one event's message stream."""

    def __init__(self, feed: "ChatFeed", event_id: int, maxsize: int = DEFAULT_QUEUE_SIZE):
        self.feed = feed
        self.event_id = event_id
        self._queue: queue.Queue[ChatMessageRecord] = queue.Queue(maxsize=maxsize)
        self.cancelled = False

    def deliver(self, message: ChatMessageRecord) -> None:
        while True:
            try:
                self._queue.put_nowait(message)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    pass

    def get(self, timeout: float | None = None) -> ChatMessageRecord | None:
        """Next message, or None when the timeout passes without one."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self.feed.unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel()


class ChatFeed:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._subscribers: dict[int, list[Subscription]] = defaultdict(list)

    def subscribe(self, event_id: int) -> Subscription:
        subscription = Subscription(self, event_id, maxsize=self.queue_size)
        with self._lock:
            self._subscribers[event_id].append(subscription)
        logger.debug("Chat subscriber added for event %s", event_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.event_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscribers.pop(subscription.event_id, None)

    def subscriber_count(self, event_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(event_id, ()))

    def total_subscribers(self) -> int:
        with self._lock:
            return sum(len(subscribers) for subscribers in self._subscribers.values())

    def publish(self, message: ChatMessageRecord) -> int:
        """Fan a persisted message out to the event's subscribers."""
        with self._lock:
            subscribers = list(self._subscribers.get(message.event_id, ()))
        for subscription in subscribers:
            subscription.deliver(message)
        return len(subscribers)


chat_feed = ChatFeed()
