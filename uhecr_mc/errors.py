"""Exceptions and warning categories for the :mod:`uhecr_mc` package."""


class UhecrMCError(Exception):
    """Base exception for uhecr_mc errors."""


class ConfigurationError(UhecrMCError, ValueError):
    """Invalid configuration: unsupported selection flag, bad or mismatched table data."""


class TableLoadError(ConfigurationError):
    """A table file is missing or cannot be parsed."""


class DataLookupError(UhecrMCError, LookupError):
    """A requested entry is absent from a data table."""

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key


class DomainWarning(UserWarning):
    """A query fell outside a table's supported range and was clamped."""


__all__ = [
    "UhecrMCError",
    "ConfigurationError",
    "TableLoadError",
    "DataLookupError",
    "DomainWarning",
]
