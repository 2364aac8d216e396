# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator


class CreateBlockPeriodRequest(BaseModel):
    """Request body for declaring a block period."""

    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=500)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class BlockPeriodResponse(BaseModel):
    id: uuid.UUID
    start_date: date
    end_date: date
    reason: str
    created_by: uuid.UUID
    created_at: datetime


class BlockPeriodListResponse(BaseModel):
    items: list[BlockPeriodResponse]
    total: int
