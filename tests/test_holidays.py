"""Integration tests for holiday CRUD API, authorization, and audit."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlmodel import col

from teamleave.models import AuditLog, Role

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from teamleave.schemas.auth import ActorContext

    MakeUser = Callable[..., Awaitable[ActorContext]]

BASE_URL = "/holidays"


def _holiday_payload(date: str = "2025-08-31", name: str = "Merdeka Day") -> dict:
    return {"date": date, "name": name}


@pytest.fixture
async def admin_headers(make_user: MakeUser) -> dict[str, str]:
    admin = await make_user(Role.ADMIN)
    return {"X-User-Id": str(admin.user_id)}


@pytest.fixture
async def staff_headers(make_user: MakeUser) -> dict[str, str]:
    staff = await make_user(Role.STAFF)
    return {"X-User-Id": str(staff.user_id)}


# ---------------------------------------------------------------------------
# Create holiday tests
# ---------------------------------------------------------------------------


async def test_create_holiday(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=admin_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["date"] == "2025-08-31"
    assert data["name"] == "Merdeka Day"
    assert "id" in data


async def test_create_holiday_requires_name(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    resp = await async_client.post(BASE_URL, json=_holiday_payload(name=""), headers=admin_headers)
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# List holiday tests
# ---------------------------------------------------------------------------


async def test_list_holidays_empty(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    resp = await async_client.get(BASE_URL, headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["items"] == []
    assert data["total"] == 0


async def test_list_holidays_ordered_by_date(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    await async_client.post(BASE_URL, json=_holiday_payload("2025-12-25", "Christmas Day"), headers=admin_headers)
    await async_client.post(BASE_URL, json=_holiday_payload("2025-08-31", "Merdeka Day"), headers=admin_headers)

    resp = await async_client.get(BASE_URL, headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [item["date"] for item in data["items"]] == ["2025-08-31", "2025-12-25"]


async def test_list_holidays_year_filter(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    await async_client.post(BASE_URL, json=_holiday_payload("2025-12-25", "Christmas 2025"), headers=admin_headers)
    await async_client.post(BASE_URL, json=_holiday_payload("2026-01-01", "New Year 2026"), headers=admin_headers)

    resp_2025 = await async_client.get(f"{BASE_URL}?year=2025", headers=admin_headers)
    data_2025 = resp_2025.json()
    assert data_2025["total"] == 1
    assert data_2025["items"][0]["date"] == "2025-12-25"

    resp_2026 = await async_client.get(f"{BASE_URL}?year=2026", headers=admin_headers)
    data_2026 = resp_2026.json()
    assert data_2026["total"] == 1
    assert data_2026["items"][0]["date"] == "2026-01-01"


async def test_list_holidays_pagination(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    for i in range(3):
        await async_client.post(
            BASE_URL,
            json=_holiday_payload(f"2025-0{i + 1}-01", f"Holiday {i}"),
            headers=admin_headers,
        )

    resp = await async_client.get(f"{BASE_URL}?offset=0&limit=2", headers=admin_headers)
    data = resp.json()
    assert data["total"] == 3
    assert len(data["items"]) == 2

    resp2 = await async_client.get(f"{BASE_URL}?offset=2&limit=2", headers=admin_headers)
    assert len(resp2.json()["items"]) == 1


# ---------------------------------------------------------------------------
# Delete holiday tests
# ---------------------------------------------------------------------------


async def test_delete_holiday(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    create_resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=admin_headers)
    assert create_resp.status_code == 201
    holiday_id = create_resp.json()["id"]

    del_resp = await async_client.delete(f"{BASE_URL}/{holiday_id}", headers=admin_headers)
    assert del_resp.status_code == 204

    list_resp = await async_client.get(BASE_URL, headers=admin_headers)
    assert list_resp.json()["total"] == 0


async def test_delete_unknown_holiday(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    resp = await async_client.delete(f"{BASE_URL}/{uuid.uuid4()}", headers=admin_headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Duplicate / conflict tests
# ---------------------------------------------------------------------------


async def test_duplicate_date_returns_409(async_client: AsyncClient, admin_headers: dict[str, str]) -> None:
    payload = _holiday_payload("2025-05-01", "Labour Day")
    resp1 = await async_client.post(BASE_URL, json=payload, headers=admin_headers)
    assert resp1.status_code == 201

    resp2 = await async_client.post(BASE_URL, json=payload, headers=admin_headers)
    assert resp2.status_code == 409
    assert resp2.json()["error"] == "DuplicateError"


# ---------------------------------------------------------------------------
# Authorization tests
# ---------------------------------------------------------------------------


async def test_non_admin_cannot_create(async_client: AsyncClient, staff_headers: dict[str, str]) -> None:
    resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=staff_headers)
    assert resp.status_code == 403


async def test_non_admin_cannot_delete(
    async_client: AsyncClient, admin_headers: dict[str, str], staff_headers: dict[str, str]
) -> None:
    create_resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=admin_headers)
    assert create_resp.status_code == 201
    holiday_id = create_resp.json()["id"]

    del_resp = await async_client.delete(f"{BASE_URL}/{holiday_id}", headers=staff_headers)
    assert del_resp.status_code == 403


async def test_staff_can_list(async_client: AsyncClient, staff_headers: dict[str, str]) -> None:
    resp = await async_client.get(BASE_URL, headers=staff_headers)
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Audit tests
# ---------------------------------------------------------------------------


async def test_create_holiday_writes_audit(
    async_client: AsyncClient,
    db_session: AsyncSession,
    admin_headers: dict[str, str],
) -> None:
    resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=admin_headers)
    assert resp.status_code == 201
    holiday_id = resp.json()["id"]

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_type) == "HOLIDAY",
            col(AuditLog.action) == "CREATE",
        )
    )
    audit = result.scalar_one()
    assert str(audit.actor_id) == admin_headers["X-User-Id"]
    assert str(audit.entity_id) == holiday_id
    assert audit.before_json is None
    assert audit.after_json is not None
    assert audit.after_json["name"] == "Merdeka Day"


async def test_delete_holiday_writes_audit(
    async_client: AsyncClient,
    db_session: AsyncSession,
    admin_headers: dict[str, str],
) -> None:
    create_resp = await async_client.post(BASE_URL, json=_holiday_payload(), headers=admin_headers)
    assert create_resp.status_code == 201
    holiday_id = create_resp.json()["id"]

    del_resp = await async_client.delete(f"{BASE_URL}/{holiday_id}", headers=admin_headers)
    assert del_resp.status_code == 204

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_type) == "HOLIDAY",
            col(AuditLog.action) == "DELETE",
        )
    )
    audit = result.scalar_one()
    assert str(audit.actor_id) == admin_headers["X-User-Id"]
    assert str(audit.entity_id) == holiday_id
    assert audit.before_json is not None
    assert audit.before_json["name"] == "Merdeka Day"
    assert audit.after_json is None
