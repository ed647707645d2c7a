"""
Exceptions and provider error classification.
"""

import re
from enum import Enum
from typing import Optional

from botocore.exceptions import ClientError


class AdditionalStacksError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(AdditionalStacksError):
    """No stacks configured, or the configuration file is unusable."""


class SelectionEmptyError(ConfigurationError):
    """Filtering left nothing to operate on."""

    def __init__(self, purpose: str):
        self.purpose = purpose
        super().__init__(f"Nothing to {purpose}. Check your stack name")


class ProviderError(AdditionalStacksError):
    """A provisioning failure detected by this package."""


class StackFailedError(ProviderError):
    """A stack reached a failed terminal status."""

    def __init__(self, logical_key: str, status: str):
        self.logical_key = logical_key
        self.status = status
        super().__init__(f'Additional stack "{logical_key}" ({status})')


class OperationCancelled(AdditionalStacksError):
    """The operation was abandoned while waiting on the provider."""


class ErrorKind(Enum):
    """How a provider error affects the stack operation."""

    ROLLBACK_COMPLETE = "rollback_complete"
    NO_UPDATES = "no_updates"
    NOT_FOUND = "not_found"
    RATE_EXCEEDED = "rate_exceeded"
    FATAL = "fatal"


# Checked in order; the first match wins.
# These match CloudFormation's human-readable messages, which is fragile.
# Switch to error codes where the API offers a distinct one.
ERROR_PATTERNS = [
    (ErrorKind.ROLLBACK_COMPLETE, re.compile(r"ROLLBACK_COMPLETE")),
    (ErrorKind.NO_UPDATES, re.compile(r"^No updates")),
    (ErrorKind.NOT_FOUND, re.compile(r"does not exist$")),
    (ErrorKind.RATE_EXCEEDED, re.compile(r"^Rate exceeded")),
]


def error_message(error: BaseException) -> str:
    """Get the provider's message for an error.

    botocore formats ClientError as "An error occurred (Code) when calling
    ...: message", so the message is taken from the parsed response instead.
    """
    if isinstance(error, ClientError):
        message: Optional[str] = error.response.get("Error", {}).get("Message")
        if message:
            return message
    return str(error)


def classify_error(error: BaseException) -> ErrorKind:
    """Classify a provider error by its message."""
    message = error_message(error)
    for kind, pattern in ERROR_PATTERNS:
        if pattern.search(message):
            return kind
    return ErrorKind.FATAL
