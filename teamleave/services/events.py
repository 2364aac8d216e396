# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

from pydantic import BaseModel

from teamleave.models.enums import AuditAction, LeaveStatus

logger = logging.getLogger(__name__)


class LeaveEvent(BaseModel):
    """Emitted after a leave request mutation has been committed."""

    request_id: uuid.UUID
    user_id: uuid.UUID
    status: LeaveStatus
    action: AuditAction
    actor_id: uuid.UUID


LeaveListener = Callable[[LeaveEvent], None]

_listeners: list[LeaveListener] = []


def subscribe(listener: LeaveListener) -> None:
    """Register a callback for committed leave mutations."""
    if listener not in _listeners:
        _listeners.append(listener)


def unsubscribe(listener: LeaveListener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def clear_listeners() -> None:
    _listeners.clear()


def publish(event: LeaveEvent) -> None:
    """Deliver an event to every listener. A failing listener never fails the caller."""
    for listener in list(_listeners):
        try:
            listener(event)
        except Exception:
            logger.exception("Leave event listener %r failed for request=%s", listener, event.request_id)
