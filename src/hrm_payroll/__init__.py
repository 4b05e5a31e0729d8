"""Payroll engine for the HR backend."""

__version__ = "0.1.0"
