"""Exceptions raised by the report compilation engine."""


class ReportError(Exception):
    """Base class for report engine failures."""


class ReportInvariantError(ReportError, RuntimeError):
    """Internal consistency breach during compilation; never retried."""
