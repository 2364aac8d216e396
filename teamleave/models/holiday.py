# ruff: noqa: TC003
from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from teamleave.models.base import UUIDBase


class PublicHoliday(UUIDBase, table=True):
    """A public holiday shown on the team calendar."""

    __tablename__ = "public_holidays"
    __table_args__ = (sa.UniqueConstraint("date", name="uq_public_holidays_date"),)

    date: datetime.date
    name: str = Field(max_length=255)
