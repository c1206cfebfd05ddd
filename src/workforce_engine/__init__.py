"""Workforce engine: timesheets, expenses and monthly payroll summaries."""

__version__ = "0.1.0"
