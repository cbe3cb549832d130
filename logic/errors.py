"""Provider error taxonomy and signature-based classification.

The content provider does not reliably expose structured error codes, so
errors are classified by inspecting their status and message text against a
single ordered table. Transient rows come first: an error that looks both
overloaded and invalid is retried rather than surfaced as a credential issue.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Tuple


class ErrorKind(str, Enum):
    """How a caller should react to a failed provider call."""

    TRANSIENT = "transient"
    INVALID_CREDENTIAL = "invalid_credential"
    FATAL = "fatal"


class PhotoshootError(Exception):
    """Base class for every error raised by the photoshoot pipeline."""

    kind: ErrorKind = ErrorKind.FATAL


class TransientProviderError(PhotoshootError):
    """Temporary provider condition worth retrying (overload, empty payload)."""

    kind = ErrorKind.TRANSIENT


class InvalidCredentialError(PhotoshootError):
    """The configured API credential is missing, invalid or not authorised.

    Callers must prompt the user to select a credential again instead of
    showing a generic failure.
    """

    kind = ErrorKind.INVALID_CREDENTIAL


class FatalProviderError(PhotoshootError):
    """Non-retryable provider failure."""

    kind = ErrorKind.FATAL


class RetryExhaustedError(FatalProviderError):
    """Transient failures persisted through every allowed attempt."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class SequenceCancelledError(PhotoshootError):
    """The caller cancelled a sequence before all frames were generated."""


ERROR_SIGNATURES: List[Tuple[str, ErrorKind]] = [
    ("503", ErrorKind.TRANSIENT),
    ("overloaded", ErrorKind.TRANSIENT),
    ("deadline", ErrorKind.TRANSIENT),
    ("timeout", ErrorKind.TRANSIENT),
    ("timed out", ErrorKind.TRANSIENT),
    ("resource exhausted", ErrorKind.TRANSIENT),
    ("resource_exhausted", ErrorKind.TRANSIENT),
    ("429", ErrorKind.TRANSIENT),
    ("service unavailable", ErrorKind.TRANSIENT),
    ("unavailable", ErrorKind.TRANSIENT),
    ("not found", ErrorKind.INVALID_CREDENTIAL),
    ("404", ErrorKind.INVALID_CREDENTIAL),
    ("api_key", ErrorKind.INVALID_CREDENTIAL),
    ("api key", ErrorKind.INVALID_CREDENTIAL),
    ("invalid", ErrorKind.INVALID_CREDENTIAL),
    ("permission denied", ErrorKind.INVALID_CREDENTIAL),
    ("permission_denied", ErrorKind.INVALID_CREDENTIAL),
    ("unauthenticated", ErrorKind.INVALID_CREDENTIAL),
    ("401", ErrorKind.INVALID_CREDENTIAL),
    ("403", ErrorKind.INVALID_CREDENTIAL),
]


def error_signature(error: BaseException) -> str:
    """Lower-cased text used for matching: status code, status name and message.

    Errors without a message (``asyncio.TimeoutError()``) contribute their
    class name instead.
    """

    message = str(error) or error.__class__.__name__
    pieces = [
        str(value)
        for value in (getattr(error, "code", None), getattr(error, "status", None), message)
        if value not in (None, "")
    ]
    return " ".join(pieces).lower()


def classify(error: BaseException) -> ErrorKind:
    """Return the :class:`ErrorKind` for any exception."""

    if isinstance(error, PhotoshootError):
        return error.kind
    signature = error_signature(error)
    for needle, kind in ERROR_SIGNATURES:
        if needle in signature:
            return kind
    return ErrorKind.FATAL


def as_photoshoot_error(error: BaseException) -> PhotoshootError:
    """Wrap a foreign exception in the public error type matching its kind."""

    if isinstance(error, PhotoshootError):
        return error
    kind = classify(error)
    message = str(error) or error.__class__.__name__
    if kind is ErrorKind.TRANSIENT:
        return TransientProviderError(message)
    if kind is ErrorKind.INVALID_CREDENTIAL:
        return InvalidCredentialError(message)
    return FatalProviderError(message)


__all__ = [
    "ERROR_SIGNATURES",
    "ErrorKind",
    "FatalProviderError",
    "InvalidCredentialError",
    "PhotoshootError",
    "RetryExhaustedError",
    "SequenceCancelledError",
    "TransientProviderError",
    "as_photoshoot_error",
    "classify",
    "error_signature",
]
