"""Pydantic schemas for the crop phase catalog."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PhaseRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	name: str
	min_duration_days: int
	max_duration_days: int
	temp_min: float
	temp_max: float


class CropRead(BaseModel):
	crop: str
	total_days_needed: int
	phases: list[PhaseRead] = Field(default_factory=list)


class CropListRead(BaseModel):
	items: list[CropRead]
