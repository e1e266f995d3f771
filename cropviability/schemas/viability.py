"""Pydantic request/response schemas for viability evaluation."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from cropviability.models.enums import FailureReasonEnum


class EvaluationRequest(BaseModel):
	location: str = Field(min_length=1, max_length=255)
	reference_year: str = Field(min_length=1, max_length=16)
	start_date: date
	crop: str = Field(min_length=1, max_length=100)


class ViabilityResponse(BaseModel):
	message: str
	city: str
	year: str
	crop: str
	start_date: date
	viable: bool
	failure_date: date | None = None
	phase: str | None = None
	reason: FailureReasonEnum | None = None
