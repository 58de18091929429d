"""Payroll state income tax calculator."""
