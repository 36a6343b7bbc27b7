"""Compliance sweep schemas."""
from datetime import date

from pydantic import BaseModel, Field


class ComplianceCheckRequest(BaseModel):
    """Optional override of the day to scan (defaults to today / yesterday)."""

    reference_date: date | None = Field(None, description="Calendar day to scan")


class ComplianceCheckResponse(BaseModel):
    notifications_created: int
    reference_date: date
