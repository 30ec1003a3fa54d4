"""Exceptions for mailtidy.

Normalization and validation never raise: failures are reported in the
returned results. These exceptions cover configuration time and the
boundary to external suggestion providers.
"""

from dataclasses import dataclass


class MailtidyError(Exception):
    """Base exception for all mailtidy errors."""

    pass


@dataclass
class ConfigurationError(MailtidyError):
    """Options could not be resolved.

    Raised when:
    - A mapping or YAML config contains an unknown key
    - A value has the wrong type (e.g. a string where a list is expected)
    - A config file cannot be parsed
    """

    message: str
    key: str | None = None

    def __str__(self) -> str:
        if self.key:
            return f"{self.message} (key: {self.key})"
        return self.message


@dataclass
class SuggestionUnavailableError(MailtidyError):
    """A suggestion provider cannot produce a suggestion right now."""

    message: str

    def __str__(self) -> str:
        return self.message
