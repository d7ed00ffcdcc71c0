"""
Exceptions raised while collecting container state.
"""


class ExporterError(Exception):
    """Base class for exporter errors."""


class RuntimeUnavailable(ExporterError):
    """The container runtime could not be reached or returned bad data."""


class TimestampParseError(ExporterError, ValueError):
    """A container timestamp is not a valid RFC3339 string."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid RFC3339 timestamp: {value!r}")
