"""Exceptions raised by the risk zones service.

Database failures are not wrapped: ``pymongo.errors.PyMongoError`` reaches
the caller unchanged.
"""

from collections.abc import Iterable

from riskzones.strings import Strings, get_strings


class RiskZonesError(Exception):
    """Base class for risk zones errors."""


class WrongDataFormatError(RiskZonesError, ValueError):
    """Input failed validation before any database call was made."""

    def __init__(self, strings: Strings | None = None, errors: Iterable[str] = ()):
        self.strings = strings or get_strings()
        self.errors = list(errors)
        self.message = self.strings.wrong_data_format
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.errors:
            return f"{self.message}: {', '.join(self.errors)}"
        return self.message
