"""Viability evaluation orchestration for one location, year, start date and crop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from cropviability.models.enums import FailureReasonEnum
from cropviability.schemas.viability import EvaluationRequest, ViabilityResponse
from cropviability.services.phase_catalog import PhaseCatalog
from cropviability.services.temperature_store import (
	TemperatureDataNotFoundError,
	TemperatureRecordStore,
)
from cropviability.services.viability_evaluator import EvaluationResult, Infeasible, evaluate

_logger = logging.getLogger("cropviability.viability_service")

VIABLE_MESSAGE = "Query completed. Planting is viable."


class StartDateNotFoundError(LookupError):
	"""Raised when the requested start date has no temperature record."""

	def __init__(self, start_date: date):
		super().__init__(f"Start date {start_date.isoformat()} not found in the temperature data.")
		self.start_date = start_date


@dataclass(frozen=True)
class ViabilityOutcome:
	request: EvaluationRequest
	result: EvaluationResult
	message: str

	def to_response(self) -> ViabilityResponse:
		failure: dict[str, object] = {}
		if isinstance(self.result, Infeasible):
			failure = {
				"failure_date": self.result.failure_date,
				"phase": self.result.phase_name,
				"reason": self.result.reason,
			}
		return ViabilityResponse(
			message=self.message,
			city=self.request.location,
			year=self.request.reference_year,
			crop=self.request.crop,
			start_date=self.request.start_date,
			viable=self.result.viable,
			**failure,
		)


class ViabilityService:
	"""Resolves data and schedule for a request, then runs the phase walk."""

	def __init__(self, store: TemperatureRecordStore, catalog: PhaseCatalog):
		self.store = store
		self.catalog = catalog

	async def evaluate(self, request: EvaluationRequest) -> ViabilityOutcome:
		schedule = self.catalog.lookup(request.crop)
		if not self.store.exists(request.location, request.reference_year):
			raise TemperatureDataNotFoundError(request.location, request.reference_year)

		async with self.store.open(request.location, request.reference_year) as series:
			if not await series.record_exists_on(request.start_date):
				raise StartDateNotFoundError(request.start_date)
			result = await evaluate(series, schedule, request.start_date)

		_logger.info(
			"viability_evaluated",
			extra={
				"city": request.location,
				"year": request.reference_year,
				"crop": schedule.crop,
				"start_date": request.start_date.isoformat(),
				"viable": result.viable,
			},
		)
		return ViabilityOutcome(request=request, result=result, message=render_message(request, result))


def render_message(request: EvaluationRequest, result: EvaluationResult) -> str:
	if not isinstance(result, Infeasible):
		return VIABLE_MESSAGE
	failure_date = result.failure_date.isoformat()
	if result.reason == FailureReasonEnum.invalid_temperature_data:
		return f"On {failure_date}, invalid temperature found in the data set."
	return f"{request.crop} becomes unviable on {failure_date}. Phase: {result.phase_name}"
