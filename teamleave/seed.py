"""Seed script for development data.

Run with:  uv run python -m teamleave.seed

Creates the development team (one admin, one approver, staff) and the 2025
public holiday list. Safe to re-run: existing emails and dates are skipped.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import uuid
from datetime import date

from sqlalchemy import select
from sqlmodel import col

from teamleave.db import dispose_engine, get_session_factory
from teamleave.models.enums import Role
from teamleave.models.holiday import PublicHoliday
from teamleave.models.profile import Profile, UserRole

logger = logging.getLogger(__name__)

# Well-known user UUIDs, usable directly as X-User-Id.
ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
APPROVER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")

TEAM = [
    {"id": ADMIN_ID, "full_name": "Aminah Rahman", "email": "aminah@example.com", "roles": [Role.ADMIN, Role.STAFF]},
    {"id": APPROVER_ID, "full_name": "Daniel Tan", "email": "daniel@example.com", "roles": [Role.APPROVER]},
    {"id": None, "full_name": "Priya Nair", "email": "priya@example.com", "roles": [Role.STAFF]},
    {"id": None, "full_name": "Wei Jie Lim", "email": "weijie@example.com", "roles": [Role.STAFF]},
    {"id": None, "full_name": "Farah Ismail", "email": "farah@example.com", "roles": [Role.STAFF]},
    {"id": None, "full_name": "Kumar Subramaniam", "email": "kumar@example.com", "roles": [Role.STAFF]},
]

HOLIDAYS_2025 = [
    ("2025-01-01", "New Year's Day"),
    ("2025-02-01", "Thaipusam"),
    ("2025-02-02", "Thaipusam (Observed)"),
    ("2025-02-17", "Chinese New Year"),
    ("2025-02-18", "Chinese New Year (2nd Day)"),
    ("2025-03-07", "Nuzul Al-Quran"),
    ("2025-03-21", "Hari Raya Aidilfitri"),
    ("2025-03-22", "Hari Raya Aidilfitri (2nd Day)"),
    ("2025-03-23", "Replacement Holiday (Raya)"),
    ("2025-05-01", "Labour Day"),
    ("2025-05-27", "Hari Raya Haji"),
    ("2025-05-31", "Wesak Day"),
    ("2025-06-01", "Agong's Birthday / Wesak Replacement"),
    ("2025-06-17", "Awal Muharram"),
    ("2025-07-07", "George Town World Heritage City Day"),
    ("2025-07-11", "Governor of Penang's Birthday"),
    ("2025-08-25", "Maulidur Rasul"),
    ("2025-08-31", "National Day"),
    ("2025-09-16", "Malaysia Day"),
    ("2025-11-08", "Deepavali"),
    ("2025-11-09", "Deepavali (Observed)"),
    ("2025-12-25", "Christmas Day"),
]


async def seed() -> None:
    """Insert the development team and holidays."""
    factory = get_session_factory()
    async with factory() as session:
        for member in TEAM:
            existing = await session.execute(select(Profile).where(col(Profile.email) == member["email"]))
            if existing.scalar_one_or_none() is not None:
                logger.info("  skip user %s (exists)", member["email"])
                continue
            profile = Profile(full_name=member["full_name"], email=member["email"])
            if member["id"] is not None:
                profile.id = member["id"]
            session.add(profile)
            await session.flush()
            for role in member["roles"]:
                session.add(UserRole(user_id=profile.id, role=role.value))
            logger.info("  user %s %s %s", profile.id, profile.full_name, [r.value for r in member["roles"]])

        for iso_date, name in HOLIDAYS_2025:
            day = date.fromisoformat(iso_date)
            existing = await session.execute(select(PublicHoliday).where(col(PublicHoliday.date) == day))
            if existing.scalar_one_or_none() is not None:
                continue
            session.add(PublicHoliday(date=day, name=name))
        logger.info("  %d holidays", len(HOLIDAYS_2025))

        await session.commit()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Seeding development data...")
    try:
        asyncio.run(_run())
    except Exception:
        logger.exception("Seeding failed")
        sys.exit(1)
    logger.info("Done.")


async def _run() -> None:
    try:
        await seed()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    main()
