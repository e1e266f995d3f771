"""Enum types shared by the evaluator, the ORM layer and the API schemas."""

from enum import StrEnum


class FailureReasonEnum(StrEnum):
    """Why a cultivation walk stopped on a given day."""

    invalid_temperature_data = "invalid_temperature_data"
    temperature_out_of_range = "temperature_out_of_range"
