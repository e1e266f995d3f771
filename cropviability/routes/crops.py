"""Read-only crop phase catalog routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from cropviability.schemas.crops import CropListRead, CropRead, PhaseRead
from cropviability.services.phase_catalog import (
	CropPhaseSchedule,
	PhaseCatalog,
	UnsupportedCropError,
	get_phase_catalog,
)

router = APIRouter(prefix="/crops", tags=["crops"])


def _to_crop_read(schedule: CropPhaseSchedule) -> CropRead:
	return CropRead(
		crop=schedule.crop,
		total_days_needed=schedule.total_days_needed,
		phases=[PhaseRead.model_validate(phase) for phase in schedule.phases],
	)


@router.get("", response_model=CropListRead)
async def list_crops(catalog: PhaseCatalog = Depends(get_phase_catalog)) -> CropListRead:
	return CropListRead(items=[_to_crop_read(catalog.lookup(crop)) for crop in catalog.crops()])


@router.get("/{crop}", response_model=CropRead)
async def get_crop(crop: str, catalog: PhaseCatalog = Depends(get_phase_catalog)) -> CropRead:
	try:
		schedule = catalog.lookup(crop)
	except UnsupportedCropError as exc:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
	return _to_crop_read(schedule)
