"""Error taxonomy and retry policy behaviour."""

import asyncio

import pytest

from logic.errors import (
    ERROR_SIGNATURES,
    ErrorKind,
    FatalProviderError,
    InvalidCredentialError,
    RetryExhaustedError,
    TransientProviderError,
    as_photoshoot_error,
    classify,
)
from logic.retry_policy import RetryPolicy, with_retry


async def _no_sleep(_: float) -> None:
    return None


class _ApiError(Exception):
    """Mimics an SDK error that carries a numeric code and a status name."""

    def __init__(self, code: int, status: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class _FlakyOperation:
    def __init__(self, errors, result="done") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.parametrize(
    "message, expected",
    [
        ("503 Service Unavailable", ErrorKind.TRANSIENT),
        ("The model is overloaded. Please try again later.", ErrorKind.TRANSIENT),
        ("Deadline exceeded", ErrorKind.TRANSIENT),
        ("429 RESOURCE_EXHAUSTED", ErrorKind.TRANSIENT),
        ("404 models/unknown is not found", ErrorKind.INVALID_CREDENTIAL),
        ("Invalid API key provided", ErrorKind.INVALID_CREDENTIAL),
        ("API_KEY_INVALID", ErrorKind.INVALID_CREDENTIAL),
        ("Something unexpected happened", ErrorKind.FATAL),
    ],
)
def test_classify_by_message_signature(message: str, expected: ErrorKind) -> None:
    assert classify(RuntimeError(message)) is expected


def test_classify_reads_code_and_status_attributes() -> None:
    assert classify(_ApiError(503, "UNAVAILABLE", "backend error")) is ErrorKind.TRANSIENT
    assert classify(_ApiError(403, "PERMISSION_DENIED", "denied")) is ErrorKind.INVALID_CREDENTIAL


def test_transient_rows_take_precedence_over_credential_rows() -> None:
    assert classify(RuntimeError("503 invalid upstream state")) is ErrorKind.TRANSIENT
    transient_rows = [i for i, (_, kind) in enumerate(ERROR_SIGNATURES) if kind is ErrorKind.TRANSIENT]
    credential_rows = [i for i, (_, kind) in enumerate(ERROR_SIGNATURES) if kind is ErrorKind.INVALID_CREDENTIAL]
    assert max(transient_rows) < min(credential_rows)


def test_own_errors_classify_by_declared_kind() -> None:
    assert classify(TransientProviderError("Empty image response")) is ErrorKind.TRANSIENT
    assert classify(RetryExhaustedError("gave up after 503s", attempts=3)) is ErrorKind.FATAL
    assert classify(asyncio.TimeoutError()) is ErrorKind.TRANSIENT


def test_as_photoshoot_error_wraps_foreign_errors() -> None:
    assert isinstance(as_photoshoot_error(RuntimeError("invalid api key")), InvalidCredentialError)
    assert isinstance(as_photoshoot_error(RuntimeError("boom")), FatalProviderError)
    original = TransientProviderError("overloaded")
    assert as_photoshoot_error(original) is original


@pytest.mark.parametrize("message", ["503 Service Unavailable", "model overloaded"])
def test_transient_errors_use_every_attempt(message: str) -> None:
    operation = _FlakyOperation([RuntimeError(message)] * 5)
    policy = RetryPolicy(max_attempts=3, sleep=_no_sleep)

    with pytest.raises(RetryExhaustedError) as excinfo:
        asyncio.run(policy.run(operation))

    assert operation.calls == 3
    assert excinfo.value.attempts == 3
    assert message in str(excinfo.value.__cause__)


@pytest.mark.parametrize("message", ["404 Not Found", "invalid api key"])
def test_credential_errors_are_not_retried(message: str) -> None:
    operation = _FlakyOperation([RuntimeError(message)] * 5)
    policy = RetryPolicy(max_attempts=3, sleep=_no_sleep)

    with pytest.raises(InvalidCredentialError):
        asyncio.run(policy.run(operation))

    assert operation.calls == 1


def test_fatal_errors_propagate_immediately() -> None:
    operation = _FlakyOperation([RuntimeError("content blocked by policy")])
    policy = RetryPolicy(max_attempts=3, sleep=_no_sleep)

    with pytest.raises(FatalProviderError):
        asyncio.run(policy.run(operation))

    assert operation.calls == 1


def test_backoff_doubles_and_caps_between_attempts() -> None:
    delays: list = []

    async def _record_sleep(seconds: float) -> None:
        delays.append(seconds)

    attempts: list = []
    operation = _FlakyOperation([RuntimeError("503")] * 4, result="ok")
    policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=3.0, sleep=_record_sleep)

    result = asyncio.run(policy.run(operation, on_attempt=attempts.append))

    assert result == "ok"
    assert delays == [1.0, 2.0, 3.0, 3.0]
    assert attempts == [0, 1, 2, 3, 4]


def test_success_after_transient_failure_returns_value() -> None:
    operation = _FlakyOperation([RuntimeError("overloaded")], result=42)
    policy = RetryPolicy(max_attempts=2, sleep=_no_sleep)

    assert asyncio.run(policy.run(operation)) == 42
    assert operation.calls == 2


def test_policy_rejects_zero_attempts() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


def test_with_retry_uses_default_policy() -> None:
    assert asyncio.run(with_retry(_FlakyOperation([]), max_attempts=2)) == "done"

    rejected = _FlakyOperation([RuntimeError("401 UNAUTHENTICATED")] * 2)
    with pytest.raises(InvalidCredentialError):
        asyncio.run(with_retry(rejected, max_attempts=2))
    assert rejected.calls == 1
