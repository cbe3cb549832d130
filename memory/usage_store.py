"""Daily generation counters kept per user."""

import json
import re
import threading
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

USER_ID_PATTERN = r"^[A-Za-z0-9_.-]+$"
_USER_ID_RE = re.compile(USER_ID_PATTERN)


def validate_user_id(user_id: str) -> str:
    """Reject ids that cannot be used verbatim as a file name inside a store."""

    if not user_id or not _USER_ID_RE.match(user_id) or ".." in user_id:
        raise ValueError(f"Invalid user id: {user_id!r}")
    return user_id


class QuotaExceededError(RuntimeError):
    """Raised when a request would exceed the user's daily generation limit."""

    def __init__(self, user_id: str, requested: int, remaining: int) -> None:
        super().__init__(
            f"Daily generation limit reached: requested {requested}, {remaining} remaining"
        )
        self.user_id = user_id
        self.requested = requested
        self.remaining = remaining


@dataclass
class UsageCounter:
    user_id: str
    count: int
    last_reset: str


class UsageTracker:
    """JSON-backed usage counters that reset at the start of each day.

    ``reserve`` checks the quota and writes the new count in one step, so
    overlapping requests for the same user cannot both pass the check.
    ``release`` hands units back when the work they were reserved for fails.
    """

    def __init__(
        self,
        base_dir: str | Path = "data/usage",
        daily_limit: int = 20,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.daily_limit = daily_limit
        self._today = clock or date.today
        self._lock = threading.Lock()

    def _path(self, user_id: str) -> Path:
        return self.base_dir / f"{validate_user_id(user_id)}.json"

    def _save(self, counter: UsageCounter) -> UsageCounter:
        self._path(counter.user_id).write_text(json.dumps(asdict(counter), indent=2))
        return counter

    def get_usage(self, user_id: str) -> UsageCounter:
        today = self._today().isoformat()
        path = self._path(user_id)
        if path.exists():
            counter = UsageCounter(**json.loads(path.read_text()))
            if counter.last_reset == today:
                return counter
        return UsageCounter(user_id=user_id, count=0, last_reset=today)

    def remaining(self, user_id: str) -> int:
        return max(self.daily_limit - self.get_usage(user_id).count, 0)

    def check_quota(self, user_id: str, requested: int) -> None:
        remaining = self.remaining(user_id)
        if requested > remaining:
            raise QuotaExceededError(user_id, requested, remaining)

    def reserve(self, user_id: str, amount: int) -> UsageCounter:
        with self._lock:
            self.check_quota(user_id, amount)
            counter = self.get_usage(user_id)
            counter.count += amount
            return self._save(counter)

    def release(self, user_id: str, amount: int) -> UsageCounter:
        with self._lock:
            counter = self.get_usage(user_id)
            counter.count = max(counter.count - amount, 0)
            return self._save(counter)

    def record(self, user_id: str, amount: int = 1) -> UsageCounter:
        with self._lock:
            counter = self.get_usage(user_id)
            counter.count += amount
            return self._save(counter)


__all__ = ["USER_ID_PATTERN", "QuotaExceededError", "UsageCounter", "UsageTracker", "validate_user_id"]
