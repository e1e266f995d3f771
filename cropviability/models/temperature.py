"""Daily temperature ORM model.

One SQLite file exists per location and reference year
(``<city>_<year>.db``).  Each holds a single ``temperaturas`` table with one
row per calendar day:

    "DATA (YYYY-MM-DD)"  TEXT   ISO date, e.g. 2012-01-31
    temp_min             REAL   daily minimum in °C, NULL when not recorded
    temp_max             REAL   daily maximum in °C, NULL when not recorded

The files are produced upstream; this service only reads them.
"""

from __future__ import annotations

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from cropviability.models.base import Base

DATE_COLUMN = "DATA (YYYY-MM-DD)"


class TemperatureRecord(Base):
    """Daily min/max air temperature for one location-year."""

    __tablename__ = "temperaturas"

    date: Mapped[str] = mapped_column(DATE_COLUMN, String(10), primary_key=True)
    temp_min: Mapped[float | None] = mapped_column(Float, nullable=True)
    temp_max: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<TemperatureRecord date={self.date} "
            f"min={self.temp_min} max={self.temp_max}>"
        )
