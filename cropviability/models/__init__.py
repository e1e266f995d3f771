"""ORM model registry — importing this module registers every table on Base.metadata.

Application code can do::

    from cropviability.models import TemperatureRecord
"""

# ── Base ────────────────────────────────────────────────────────────────────
from cropviability.models.base import Base

# ── Enums ───────────────────────────────────────────────────────────────────
from cropviability.models.enums import FailureReasonEnum

# ── Temperature records ─────────────────────────────────────────────────────
from cropviability.models.temperature import DATE_COLUMN, TemperatureRecord

__all__ = [
    "DATE_COLUMN",
    # Base
    "Base",
    # Enums
    "FailureReasonEnum",
    # Temperature records
    "TemperatureRecord",
]
