# volunteer_hub/engagement/chat.py
"""
Per-event chat timeline with optimistic sends.

A locally sent message is shown immediately under a generated ``client_ref``.
The persisted copy can come back twice: once as the insert result and once as
the realtime echo. Both are matched by identity (message id, or client_ref
before the id is known), never by text.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from .errors import ValidationFailed
from .records import ActorSession, ChatMessageRecord, require_actor


def new_client_ref() -> str:
    return uuid.uuid4().hex


def validate_body(body: str | None) -> str:
    if body is None or not body.strip():
        raise ValidationFailed("Message cannot be empty", field="message")
    return body


class ChatTimeline:
    """Ordered, de-duplicated message list for one event."""

    def __init__(self, event_id: int, messages: Iterable[ChatMessageRecord] = ()):
        self.event_id = event_id
        self._messages: list[ChatMessageRecord] = []
        for message in messages:
            self.receive(message)

    def __iter__(self):
        return iter(self._messages)

    def __len__(self):
        return len(self._messages)

    @property
    def messages(self) -> list[ChatMessageRecord]:
        return list(self._messages)

    def _index_of(self, message: ChatMessageRecord) -> int | None:
        for index, existing in enumerate(self._messages):
            if message.message_id is not None and existing.message_id == message.message_id:
                return index
            if message.client_ref and existing.client_ref == message.client_ref:
                return index
        return None

    def _insert_ordered(self, message: ChatMessageRecord) -> None:
        position = len(self._messages)
        while position > 0 and self._messages[position - 1].created_at > message.created_at:
            position -= 1
        self._messages.insert(position, message)

    def append_local(self, actor: ActorSession | None, body: str, now: datetime) -> ChatMessageRecord:
        """Optimistically show a message before the store has accepted it."""
        actor = require_actor(actor)
        body = validate_body(body)
        pending = ChatMessageRecord(
            event_id=self.event_id,
            volunteer_id=actor.volunteer_id,
            volunteer_name=actor.display_name,
            volunteer_email=actor.email,
            body=body,
            created_at=now,
            client_ref=new_client_ref(),
        )
        self._messages.append(pending)
        return pending

    def confirm(self, client_ref: str, persisted: ChatMessageRecord) -> ChatMessageRecord:
        """Swap the pending entry for its persisted copy."""
        if persisted.client_ref != client_ref:
            persisted = replace(persisted, client_ref=client_ref)
        return self.receive(persisted)

    def receive(self, message: ChatMessageRecord) -> ChatMessageRecord:
        """Merge a message from the store or the realtime feed."""
        if message.event_id != self.event_id:
            raise ValueError(f"Message for event {message.event_id} received on event {self.event_id}")
        index = self._index_of(message)
        if index is None:
            self._insert_ordered(message)
            return message
        existing = self._messages[index]
        if existing.is_pending and not message.is_pending:
            # Keep the optimistic slot so the sender's view does not jump
            self._messages[index] = replace(message, client_ref=message.client_ref or existing.client_ref)
            return self._messages[index]
        return existing
