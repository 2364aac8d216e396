"""Unit tests for in-process collaborators: the identity provider stub and leave event listeners."""

from __future__ import annotations

import uuid
from urllib.parse import parse_qs, urlsplit

from teamleave.models.enums import AuditAction, LeaveStatus
from teamleave.services import events
from teamleave.services.identity import InMemoryIdentityProvider


def _event(action: AuditAction = AuditAction.SUBMIT) -> events.LeaveEvent:
    return events.LeaveEvent(
        request_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        status=LeaveStatus.PENDING,
        action=action,
        actor_id=uuid.uuid4(),
    )


# ---------------------------------------------------------------------------
# InMemoryIdentityProvider
# ---------------------------------------------------------------------------


async def test_identity_provider_builds_link_under_base_url() -> None:
    provider = InMemoryIdentityProvider(base_url="https://auth.test/reset")
    link = await provider.generate_password_reset_link("a+b@example.com")

    parts = urlsplit(link)
    assert parts.netloc == "auth.test"
    assert parts.path == "/reset"
    assert parse_qs(parts.query)["email"] == ["a+b@example.com"]


async def test_identity_provider_records_issued_links() -> None:
    provider = InMemoryIdentityProvider(base_url="https://auth.test/reset")
    first = await provider.generate_password_reset_link("one@example.com")
    second = await provider.generate_password_reset_link("two@example.com")

    assert [i.email for i in provider.issued] == ["one@example.com", "two@example.com"]
    assert [i.link for i in provider.issued] == [first, second]


async def test_identity_provider_defaults_to_settings_base_url() -> None:
    provider = InMemoryIdentityProvider()
    link = await provider.generate_password_reset_link("one@example.com")
    assert link.startswith("http://localhost:5173/reset-password?")


# ---------------------------------------------------------------------------
# Leave events
# ---------------------------------------------------------------------------


def test_publish_without_listeners_is_a_no_op() -> None:
    events.publish(_event())


def test_subscribe_and_publish() -> None:
    received: list[events.LeaveEvent] = []
    events.subscribe(received.append)

    event = _event()
    events.publish(event)
    assert received == [event]


def test_subscribe_is_idempotent() -> None:
    received: list[events.LeaveEvent] = []
    listener = received.append
    events.subscribe(listener)
    events.subscribe(listener)

    events.publish(_event())
    assert len(received) == 1


def test_unsubscribe() -> None:
    received: list[events.LeaveEvent] = []
    listener = received.append
    events.subscribe(listener)
    events.unsubscribe(listener)
    events.unsubscribe(listener)

    events.publish(_event())
    assert received == []


def test_failing_listener_does_not_stop_others() -> None:
    received: list[events.LeaveEvent] = []

    def _boom(event: events.LeaveEvent) -> None:
        raise RuntimeError("mailer down")

    events.subscribe(_boom)
    events.subscribe(received.append)

    events.publish(_event(AuditAction.APPROVE))
    assert [e.action for e in received] == [AuditAction.APPROVE]
