"""Console front-end for the payroll tax calculator."""

from .app import PayrollConsole
from .main import main

__all__ = ["PayrollConsole", "main"]
