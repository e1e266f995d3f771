"""Crop growth-phase catalog.

Each crop maps to an ordered list of phases; the order is the cultivation
order.  The catalog is data-driven: phases are loaded from a JSON document
of the form::

    {
        "crops": {
            "arroz": {
                "aliases": ["rice"],
                "phases": [
                    {
                        "name": "Germinação",
                        "min_duration_days": 5,
                        "max_duration_days": 10,
                        "temp_min": 10,
                        "temp_max": 45
                    },
                    ...
                ]
            }
        }
    }

Adding a crop only requires a new entry in that document.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from cropviability.config import get_settings

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[1] / "data" / "crop_phases.json"


class UnsupportedCropError(ValueError):
	"""Raised when a crop has no phase schedule in the catalog."""

	def __init__(self, crop: str):
		super().__init__(f"Crop '{crop}' is not supported.")
		self.crop = crop


@dataclass(frozen=True)
class CropPhase:
	name: str
	min_duration_days: int
	max_duration_days: int
	temp_min: float
	temp_max: float

	def __post_init__(self) -> None:
		if not self.name:
			raise ValueError("phase name must not be empty")
		if self.min_duration_days < 1:
			raise ValueError(f"phase '{self.name}': min_duration_days must be >= 1")
		if self.max_duration_days < self.min_duration_days:
			raise ValueError(
				f"phase '{self.name}': max_duration_days must be >= min_duration_days"
			)
		if self.temp_min > self.temp_max:
			raise ValueError(f"phase '{self.name}': temp_min must be <= temp_max")

	def accepts(self, temp_min: float, temp_max: float) -> bool:
		"""True when a day's min/max both sit inside this phase's band."""
		return temp_min >= self.temp_min and temp_max <= self.temp_max


@dataclass(frozen=True)
class CropPhaseSchedule:
	crop: str
	phases: tuple[CropPhase, ...]

	def __post_init__(self) -> None:
		if not self.phases:
			raise ValueError(f"crop '{self.crop}' must define at least one phase")
		names = [phase.name for phase in self.phases]
		if len(set(names)) != len(names):
			raise ValueError(f"crop '{self.crop}' has duplicate phase names")

	@property
	def total_days_needed(self) -> int:
		return sum(phase.max_duration_days for phase in self.phases)

	def phase(self, name: str) -> CropPhase:
		for phase in self.phases:
			if phase.name == name:
				return phase
		raise LookupError(f"Phase '{name}' not found for crop '{self.crop}'")


class PhaseCatalog:
	"""Read-only crop → phase schedule table with case-insensitive lookup."""

	def __init__(self, schedules: Mapping[str, CropPhaseSchedule], aliases: Mapping[str, str] | None = None):
		self._schedules = {_normalize(crop): schedule for (crop, schedule) in schedules.items()}
		self._aliases: dict[str, str] = {}
		for alias, crop in (aliases or {}).items():
			key = _normalize(alias)
			target = _normalize(crop)
			if key in self._schedules or key in self._aliases:
				raise ValueError(f"alias '{alias}' collides with an existing crop key")
			if target not in self._schedules:
				raise ValueError(f"alias '{alias}' points to unknown crop '{crop}'")
			self._aliases[key] = target

	def lookup(self, crop_name: str) -> CropPhaseSchedule:
		key = _normalize(crop_name)
		key = self._aliases.get(key, key)
		schedule = self._schedules.get(key)
		if schedule is None:
			raise UnsupportedCropError(crop_name)
		return schedule

	def crops(self) -> list[str]:
		return sorted(self._schedules)

	def __contains__(self, crop_name: object) -> bool:
		if not isinstance(crop_name, str):
			return False
		key = _normalize(crop_name)
		return key in self._schedules or key in self._aliases


def _normalize(crop_name: str) -> str:
	return crop_name.strip().casefold()


def _parse_phase(crop: str, index: int, raw: Any) -> CropPhase:
	if not isinstance(raw, Mapping):
		raise ValueError(f"crop '{crop}': phase #{index + 1} must be an object")
	try:
		return CropPhase(
			name=str(raw["name"]).strip(),
			min_duration_days=int(raw["min_duration_days"]),
			max_duration_days=int(raw["max_duration_days"]),
			temp_min=float(raw["temp_min"]),
			temp_max=float(raw["temp_max"]),
		)
	except KeyError as exc:
		raise ValueError(f"crop '{crop}': phase #{index + 1} is missing {exc.args[0]!r}") from exc
	except (TypeError, ValueError) as exc:
		raise ValueError(f"crop '{crop}': phase #{index + 1} is invalid: {exc}") from exc


def catalog_from_mapping(raw: Any) -> PhaseCatalog:
	"""Build a catalog from an already-decoded JSON document."""
	if not isinstance(raw, Mapping) or not isinstance(raw.get("crops"), Mapping):
		raise ValueError("invalid catalog: expected an object with a 'crops' mapping")

	schedules: dict[str, CropPhaseSchedule] = {}
	aliases: dict[str, str] = {}
	for crop, entry in raw["crops"].items():
		key = _normalize(str(crop))
		if not key:
			raise ValueError("invalid catalog: crop keys must not be blank")
		if key in schedules:
			raise ValueError(f"invalid catalog: duplicate crop '{crop}'")
		if not isinstance(entry, Mapping):
			raise ValueError(f"invalid catalog: crop '{crop}' must be an object")

		phases = entry.get("phases")
		if not isinstance(phases, list):
			raise ValueError(f"invalid catalog: crop '{crop}' must list its phases")
		schedules[key] = CropPhaseSchedule(
			crop=key,
			phases=tuple(_parse_phase(key, index, phase) for (index, phase) in enumerate(phases)),
		)
		for alias in entry.get("aliases") or []:
			if _normalize(str(alias)) in {_normalize(known) for known in aliases}:
				raise ValueError(f"invalid catalog: duplicate alias '{alias}'")
			aliases[str(alias)] = key

	return PhaseCatalog(schedules, aliases)


def load_catalog(path: Path = DEFAULT_CATALOG_PATH) -> PhaseCatalog:
	if not path.exists():
		raise FileNotFoundError(f"Crop catalog not found: {path}")
	with path.open("r", encoding="utf-8") as handle:
		raw = json.load(handle)
	return catalog_from_mapping(raw)


@lru_cache
def get_phase_catalog() -> PhaseCatalog:
	"""Process-wide catalog, built once from settings."""
	settings = get_settings()
	if settings.crop_catalog_path:
		return load_catalog(Path(settings.crop_catalog_path))
	return load_catalog()
