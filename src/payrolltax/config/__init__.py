"""Schema models and settings for the payroll tax calculator."""

from .schema import (
    ConfigurationError,
    Employee,
    Jurisdiction,
    Settings,
    TaxBracket,
)
from .settings import SETTINGS_ENV, load_settings

__all__ = [
    "ConfigurationError",
    "Employee",
    "Jurisdiction",
    "SETTINGS_ENV",
    "Settings",
    "TaxBracket",
    "load_settings",
]
