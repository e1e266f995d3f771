"""Shared pytest fixtures — temperature files, fake series, async test client."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import Session

from cropviability.main import app
from cropviability.models import Base, TemperatureRecord
from cropviability.services.phase_catalog import PhaseCatalog, load_catalog
from cropviability.services.temperature_store import (
	TemperatureReading,
	TemperatureRecordStore,
	get_temperature_store,
)

START = date(2012, 1, 1)

# Inside every arroz phase band (tightest band: min >= 17, max <= 30).
GOOD_DAY = (18.0, 28.0)

Readings = dict[date, tuple[float | None, float | None]]


def daily_readings(
	start: date = START,
	days: int = 120,
	value: tuple[float | None, float | None] = GOOD_DAY,
) -> Readings:
	return {start + timedelta(days=offset): value for offset in range(days)}


def write_temperature_db(path: Path, readings: Readings) -> Path:
	"""Create a ``temperaturas`` SQLite file holding ``readings``."""
	engine = create_engine(f"sqlite:///{path}")
	Base.metadata.create_all(engine)
	with Session(engine) as session:
		session.add_all(
			TemperatureRecord(date=day.isoformat(), temp_min=low, temp_max=high)
			for (day, (low, high)) in sorted(readings.items())
		)
		session.commit()
	engine.dispose()
	return path


class FakeSeries:
	"""In-memory stand-in for an open temperature file; records every read."""

	def __init__(self, readings: Readings) -> None:
		self.readings = readings
		self.reads: list[date] = []
		self.count_calls: list[tuple[date, date]] = []

	async def count_records_in_range(self, date_from: date, date_to: date) -> int:
		self.count_calls.append((date_from, date_to))
		return sum(1 for day in self.readings if date_from <= day <= date_to)

	async def get_reading(self, day: date) -> TemperatureReading | None:
		self.reads.append(day)
		if day not in self.readings:
			return None
		low, high = self.readings[day]
		return TemperatureReading(date=day, temp_min=low, temp_max=high)

	async def record_exists_on(self, day: date) -> bool:
		return day in self.readings


def arroz_read_offsets() -> list[int]:
	"""Day offsets the arroz walk reads, in order (cumulative stepping)."""
	offsets: list[int] = []
	elapsed = 0
	for low, high in ((5, 10), (20, 40), (10, 15), (7, 10), (15, 20)):
		for duration in range(low, high + 1):
			offsets.append(elapsed + duration)
			elapsed += 1
	return offsets


@pytest.fixture
def catalog() -> PhaseCatalog:
	return load_catalog()


@pytest.fixture
def data_folder(tmp_path: Path) -> Path:
	folder = tmp_path / "Data"
	folder.mkdir()
	return folder


@pytest.fixture
def store(data_folder: Path) -> TemperatureRecordStore:
	return TemperatureRecordStore(data_folder)


@pytest.fixture
def disposed_engines(monkeypatch: pytest.MonkeyPatch) -> list[AsyncEngine]:
	"""Records every async engine disposed while the test runs."""
	disposed: list[AsyncEngine] = []
	original = AsyncEngine.dispose

	async def spy(self: AsyncEngine, close: bool = True) -> None:
		disposed.append(self)
		await original(self, close=close)

	monkeypatch.setattr(AsyncEngine, "dispose", spy)
	return disposed


@pytest.fixture
async def client(store: TemperatureRecordStore) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and the store pointed at tmp data."""

	app.dependency_overrides[get_temperature_store] = lambda: store
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
