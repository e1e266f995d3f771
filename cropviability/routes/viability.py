"""Viability evaluation route."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cropviability.schemas.viability import EvaluationRequest, ViabilityResponse
from cropviability.services.phase_catalog import PhaseCatalog, get_phase_catalog
from cropviability.services.temperature_store import (
	StoreUnavailableError,
	TemperatureRecordStore,
	get_temperature_store,
)
from cropviability.services.viability_service import ViabilityService

router = APIRouter(prefix="/viability", tags=["viability"])

_logger = logging.getLogger("cropviability.routes.viability")
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

MISSING_PARAMETERS_DETAIL = "The 'city', 'year', 'date' and 'crop' parameters are required."
INVALID_DATE_DETAIL = "Invalid date. Use the YYYY-MM-DD format."


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	_logger.exception("viability_failure", extra={"error": str(exc)})
	if isinstance(exc, StoreUnavailableError):
		return HTTPException(
			status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
			detail="Error querying the temperature database.",
		)
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="viability failure")


def _parse_start_date(value: str) -> date:
	if not _DATE_PATTERN.fullmatch(value):
		raise ValueError(INVALID_DATE_DETAIL)
	try:
		return datetime.strptime(value, "%Y-%m-%d").date()
	except ValueError as exc:
		raise ValueError(INVALID_DATE_DETAIL) from exc


@router.get(
	"",
	response_model=ViabilityResponse,
	summary="Check whether a crop can be planted at a city from a start date.",
)
async def get_viability(
	city: str | None = Query(default=None, description="City where the crop would be planted."),
	year: str | None = Query(default=None, description="Reference year of the temperature records."),
	start_date: str | None = Query(default=None, alias="date", description="Start date, YYYY-MM-DD."),
	crop: str | None = Query(default=None, description="Crop to evaluate, e.g. arroz."),
	store: TemperatureRecordStore = Depends(get_temperature_store),
	catalog: PhaseCatalog = Depends(get_phase_catalog),
) -> ViabilityResponse:
	params = [city, year, start_date, crop]
	if any(value is None or not value.strip() for value in params):
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_PARAMETERS_DETAIL)

	service = ViabilityService(store, catalog)
	try:
		request = EvaluationRequest(
			location=city.strip(),  # type: ignore[union-attr]
			reference_year=year.strip(),  # type: ignore[union-attr]
			start_date=_parse_start_date(start_date.strip()),  # type: ignore[union-attr]
			crop=crop.strip(),  # type: ignore[union-attr]
		)
		outcome = await service.evaluate(request)
	except Exception as exc:
		raise _map_error(exc) from exc
	return outcome.to_response()
