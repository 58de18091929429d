"""Pydantic models describing tax tables, employees and runtime settings."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_EVEN, Decimal
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from payrolltax.rounding import ROUNDING_MODES, round_currency

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class TaxBracket(ImmutableModel):
    """A flat marginal rate applied to income between ``floor`` and ``ceiling``."""

    jurisdiction_code: str = Field(alias="code")
    jurisdiction_name: str = Field(alias="name")
    floor: Decimal
    ceiling: Decimal = Field(allow_inf_nan=True)
    rate: Decimal

    @field_validator("jurisdiction_code", "jurisdiction_name", mode="before")
    @classmethod
    def _strip_labels(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.ceiling.is_nan():
            raise ConfigurationError("Bracket ceilings must be numbers")
        if self.floor >= self.ceiling:
            raise ConfigurationError("Bracket floors must be below their ceilings")
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Bracket rates must be between 0 and 1")
        return self

    @property
    def open_ended(self) -> bool:
        return self.ceiling.is_infinite()


class Jurisdiction(ImmutableModel):
    """A taxing authority identified by code and display name."""

    code: str
    name: str


class Employee(ImmutableModel):
    """An hourly employee assigned to a single jurisdiction."""

    id: int
    name: str | None = None
    jurisdiction_code: str | None = Field(default=None, alias="state_code")
    hours_worked: Decimal = Field(ge=0)
    rate: Decimal = Field(ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def _require_whole_number(cls, value: Any) -> Any:
        if isinstance(value, str) and not _INTEGER_PATTERN.fullmatch(value.strip()):
            raise ValueError(f"Employee id must be a whole number, got '{value}'")
        return value

    @field_validator("name", "jurisdiction_code", mode="before")
    @classmethod
    def _coerce_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def gross_wages(self, rounding: str = ROUND_HALF_EVEN) -> Decimal:
        """Return hours worked times the hourly rate, rounded to cents."""

        return round_currency(self.hours_worked * self.rate, rounding)


RoundingMode = Literal["HALF_EVEN", "HALF_UP"]

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(ImmutableModel):
    """Runtime settings read from the optional YAML settings file."""

    employees_file: Path = Path("employees.csv")
    tax_table_file: Path = Path("taxtable.csv")
    include_lowest_bracket: bool = False
    rounding: RoundingMode = "HALF_EVEN"
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_log_level(self) -> Settings:
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level '{self.log_level}'")
        return self

    @property
    def rounding_mode(self) -> str:
        """Return the :mod:`decimal` rounding constant for ``rounding``."""

        return ROUNDING_MODES[self.rounding]

    def resolve_paths(self, base: Path) -> Settings:
        """Return a copy with relative file paths anchored at ``base``."""

        updates: dict[str, Path] = {}
        for field_name in ("employees_file", "tax_table_file"):
            path = getattr(self, field_name)
            if not path.is_absolute():
                updates[field_name] = base / path
        if not updates:
            return self
        return self.model_copy(update=updates)


__all__ = [
    "ConfigurationError",
    "Employee",
    "ImmutableModel",
    "Jurisdiction",
    "RoundingMode",
    "Settings",
    "TaxBracket",
]
