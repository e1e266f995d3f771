"""Day-by-day growth-phase walk over historical temperature records.

Starting from ``start_date`` every phase of a crop schedule is checked for
every plausible duration between its minimum and maximum.  For duration
``d`` the day under test is ``start_date + elapsed_days + d`` where
``elapsed_days`` counts every duration candidate already tried, across all
phases.  The offset is therefore cumulative rather than phase-local, so later
phases look further ahead than their own cumulative durations.

The walk stops at the first day whose reading is missing or outside the
phase band.  Reads are strictly sequential: no day after a failure is read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from cropviability.models.enums import FailureReasonEnum
from cropviability.services.phase_catalog import CropPhase, CropPhaseSchedule
from cropviability.services.temperature_store import TemperatureSeries

_logger = logging.getLogger("cropviability.evaluator")


class InsufficientDataRangeError(ValueError):
	"""Raised when too few daily records exist to cover every phase."""

	def __init__(self, start_date: date, end_date: date, available: int, needed: int):
		super().__init__(
			"The query period is too short to cover every cultivation phase "
			f"({available} daily records between {start_date.isoformat()} and "
			f"{end_date.isoformat()}, {needed} needed)."
		)
		self.start_date = start_date
		self.end_date = end_date
		self.available = available
		self.needed = needed


@dataclass(frozen=True)
class Viable:
	@property
	def viable(self) -> bool:
		return True


@dataclass(frozen=True)
class Infeasible:
	failure_date: date
	phase_name: str
	reason: FailureReasonEnum

	@property
	def viable(self) -> bool:
		return False


EvaluationResult = Viable | Infeasible


async def evaluate(
	series: TemperatureSeries,
	schedule: CropPhaseSchedule,
	start_date: date,
) -> EvaluationResult:
	"""Walk ``schedule`` from ``start_date`` and return the verdict.

	Raises ``InsufficientDataRangeError`` before any per-day read when the
	data window cannot hold the longest possible schedule.
	"""
	total_days_needed = schedule.total_days_needed
	end_date = _shift(start_date, total_days_needed, total_days_needed)
	available = await series.count_records_in_range(start_date, end_date)
	if available < total_days_needed:
		_logger.info(
			"insufficient_data_range",
			extra={
				"crop": schedule.crop,
				"start_date": start_date.isoformat(),
				"available": available,
				"needed": total_days_needed,
			},
		)
		raise InsufficientDataRangeError(start_date, end_date, available, total_days_needed)

	elapsed_days = 0
	for phase in schedule.phases:
		for duration in range(phase.min_duration_days, phase.max_duration_days + 1):
			day = _shift(start_date, elapsed_days + duration, total_days_needed)
			reading = await series.get_reading(day)

			if reading is None or reading.is_missing:
				return _fail(schedule, phase, day, FailureReasonEnum.invalid_temperature_data)

			if not phase.accepts(reading.temp_min, reading.temp_max):  # type: ignore[arg-type]
				return _fail(schedule, phase, day, FailureReasonEnum.temperature_out_of_range)

			elapsed_days += 1

	return Viable()


def _shift(start_date: date, days: int, total_days_needed: int) -> date:
	"""Offset a date, treating the end of the calendar as the end of the data."""
	try:
		return start_date + timedelta(days=days)
	except OverflowError as exc:
		available = (date.max - start_date).days + 1
		raise InsufficientDataRangeError(start_date, date.max, available, total_days_needed) from exc


def _fail(
	schedule: CropPhaseSchedule,
	phase: CropPhase,
	day: date,
	reason: FailureReasonEnum,
) -> Infeasible:
	_logger.info(
		"phase_failed",
		extra={
			"crop": schedule.crop,
			"phase": phase.name,
			"date": day.isoformat(),
			"reason": reason.value,
		},
	)
	return Infeasible(failure_date=day, phase_name=phase.name, reason=reason)
