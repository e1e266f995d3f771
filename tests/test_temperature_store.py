from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from conftest import START, daily_readings, write_temperature_db
from cropviability.services.temperature_store import (
    StoreUnavailableError,
    TemperatureDataNotFoundError,
    TemperatureReading,
    TemperatureRecordStore,
)


@pytest.fixture
def pelotas(data_folder: Path) -> Path:
    readings = daily_readings(days=10)
    readings[START + timedelta(days=3)] = (None, 27.5)
    readings[START + timedelta(days=4)] = (0.0, 30.0)
    return write_temperature_db(data_folder / "Pelotas_2012.db", readings)


def test_exists_follows_file_template(store: TemperatureRecordStore, pelotas: Path) -> None:
    assert store.exists("Pelotas", "2012") is True
    assert store.exists("Pelotas", "2013") is False
    assert store.path_for("Pelotas", "2012") == pelotas


def test_custom_file_template(data_folder: Path) -> None:
    write_temperature_db(data_folder / "2012-porto-alegre.sqlite", daily_readings(days=1))
    store = TemperatureRecordStore(data_folder, file_template="{year}-{city}.sqlite")

    assert store.exists("porto-alegre", "2012")


@pytest.mark.parametrize(
    ("location", "year"),
    [("../Pelotas", "2012"), ("Pelotas", "../2012"), ("a\\b", "2012"), ("..", "2012"), ("", "2012"), ("Pelotas", "  ")],
)
def test_rejects_unsafe_or_blank_names(store: TemperatureRecordStore, location: str, year: str) -> None:
    with pytest.raises(ValueError):
        store.exists(location, year)


@pytest.mark.asyncio
async def test_queries_against_sqlite_file(store: TemperatureRecordStore, pelotas: Path) -> None:
    async with store.open("Pelotas", "2012") as series:
        assert await series.count_records_in_range(START, START + timedelta(days=95)) == 10
        assert await series.count_records_in_range(START + timedelta(days=2), START + timedelta(days=4)) == 3
        assert await series.record_exists_on(START) is True
        assert await series.record_exists_on(date(2011, 12, 31)) is False

        reading = await series.get_reading(START + timedelta(days=1))
        assert reading == TemperatureReading(START + timedelta(days=1), 18.0, 28.0)
        assert reading.is_missing is False

        assert await series.get_reading(START + timedelta(days=30)) is None


@pytest.mark.asyncio
async def test_null_and_zero_readings_are_missing(store: TemperatureRecordStore, pelotas: Path) -> None:
    async with store.open("Pelotas", "2012") as series:
        null_reading = await series.get_reading(START + timedelta(days=3))
        zero_reading = await series.get_reading(START + timedelta(days=4))

    assert null_reading is not None and null_reading.temp_min is None
    assert null_reading.is_missing
    assert zero_reading is not None and zero_reading.temp_min == 0.0
    assert zero_reading.is_missing


@pytest.mark.asyncio
async def test_store_never_writes(store: TemperatureRecordStore, pelotas: Path) -> None:
    before = pelotas.read_bytes()
    async with store.open("Pelotas", "2012") as series:
        await series.count_records_in_range(START, START + timedelta(days=95))
    assert pelotas.read_bytes() == before


@pytest.mark.asyncio
async def test_open_missing_file_raises_not_found(store: TemperatureRecordStore, data_folder: Path) -> None:
    with pytest.raises(TemperatureDataNotFoundError) as excinfo:
        async with store.open("Rio Grande", "2012"):
            pass

    assert isinstance(excinfo.value, LookupError)
    assert not (data_folder / "Rio Grande_2012.db").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"", b"definitely not a sqlite database" * 64])
async def test_unreadable_file_is_store_unavailable(
    store: TemperatureRecordStore,
    data_folder: Path,
    content: bytes,
    disposed_engines: list,
) -> None:
    (data_folder / "Broken_2012.db").write_bytes(content)

    with pytest.raises(StoreUnavailableError) as excinfo:
        async with store.open("Broken", "2012") as series:
            await series.record_exists_on(START)

    assert "Broken" in str(excinfo.value)
    assert len(disposed_engines) == 1
