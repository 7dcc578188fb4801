"""Pydantic schemas for the metrics API."""

from decimal import Decimal

from pydantic import BaseModel, Field

# NUMERIC(14, 2)
MAX_GOAL_TARGET = Decimal("999999999999.99")


class GoalUpsertRequest(BaseModel):
    year: int = Field(..., ge=1900, le=2200)
    month: int | None = Field(None, ge=1, le=12, description="Omit for the annual goal")
    target: Decimal = Field(..., gt=0, le=MAX_GOAL_TARGET)
