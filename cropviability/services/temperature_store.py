"""Read-only access to per-location/year daily temperature files."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from cropviability.config import get_settings
from cropviability.models.temperature import TemperatureRecord

_logger = logging.getLogger("cropviability.temperature_store")

# Readings stored as 0 are treated as "not recorded", exactly like NULL.
# A genuine 0.0 °C day is therefore indistinguishable from a gap.
MISSING_SENTINEL = 0.0


class StoreUnavailableError(RuntimeError):
	"""Raised when a temperature file cannot be opened or queried."""


class TemperatureDataNotFoundError(LookupError):
	"""Raised when no temperature file exists for a location/year."""

	def __init__(self, location: str, year: str):
		super().__init__(f"No temperature data found for city '{location}' and year '{year}'.")
		self.location = location
		self.year = year


@dataclass(frozen=True)
class TemperatureReading:
	date: date
	temp_min: float | None
	temp_max: float | None

	@property
	def is_missing(self) -> bool:
		return any(
			value is None or value == MISSING_SENTINEL
			for value in (self.temp_min, self.temp_max)
		)


class TemperatureSeries:
	"""Query interface over one open location/year temperature file."""

	def __init__(self, session: AsyncSession, location: str, year: str):
		self.session = session
		self.location = location
		self.year = year

	async def count_records_in_range(self, date_from: date, date_to: date) -> int:
		"""Number of daily rows between both dates, inclusive."""
		stmt = (
			select(func.count())
			.select_from(TemperatureRecord)
			.where(TemperatureRecord.date.between(date_from.isoformat(), date_to.isoformat()))
		)
		row = await self._execute(stmt, "count_records_in_range")
		return int(row.scalar_one())

	async def get_reading(self, day: date) -> TemperatureReading | None:
		stmt = select(TemperatureRecord.temp_min, TemperatureRecord.temp_max).where(
			TemperatureRecord.date == day.isoformat()
		)
		rows = await self._execute(stmt, "get_reading")
		record = rows.first()
		if record is None:
			return None
		return TemperatureReading(date=day, temp_min=record.temp_min, temp_max=record.temp_max)

	async def record_exists_on(self, day: date) -> bool:
		return await self.count_records_in_range(day, day) > 0

	async def _execute(self, stmt, operation: str):  # type: ignore[no-untyped-def]
		try:
			return await self.session.execute(stmt)
		except SQLAlchemyError as exc:
			_logger.error(
				"temperature_store_query_failed",
				extra={
					"operation": operation,
					"location": self.location,
					"year": self.year,
					"error": str(exc),
				},
			)
			raise StoreUnavailableError(
				f"Error querying temperature data for '{self.location}' ({self.year}): {exc}"
			) from exc


class TemperatureRecordStore:
	"""Locates ``<city>_<year>.db`` files inside a data folder and opens them."""

	def __init__(self, folder: Path, file_template: str = "{city}_{year}.db"):
		self.folder = folder
		self.file_template = file_template

	def path_for(self, location: str, year: str) -> Path:
		for label, value in (("city", location), ("year", year)):
			if not value or not value.strip():
				raise ValueError(f"{label} must not be blank")
			if "/" in value or "\\" in value or value in {".", ".."} or "\x00" in value:
				raise ValueError(f"{label} contains invalid characters")
		filename = self.file_template.format(city=location, year=year)
		return self.folder / filename

	def exists(self, location: str, year: str) -> bool:
		return self.path_for(location, year).is_file()

	@asynccontextmanager
	async def open(self, location: str, year: str) -> AsyncIterator[TemperatureSeries]:
		"""Open one location/year file for reading; always released on exit."""
		path = self.path_for(location, year)
		if not path.is_file():
			raise TemperatureDataNotFoundError(location, year)

		url = URL.create(
			"sqlite+aiosqlite",
			database=path.resolve().as_uri(),
			query={"mode": "ro", "uri": "true"},
		)
		engine = create_async_engine(url)
		try:
			async with AsyncSession(engine) as session:
				yield TemperatureSeries(session, location, year)
		finally:
			await engine.dispose()


def get_temperature_store() -> TemperatureRecordStore:
	settings = get_settings()
	return TemperatureRecordStore(
		settings.database_path,
		file_template=settings.database_file_template,
	)
