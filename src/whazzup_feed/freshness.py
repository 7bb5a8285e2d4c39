"""
Freshness gate for persisted feed resources.

Decides whether a locally persisted resource has to be downloaded again,
based on its modification time and a FreshnessPolicy. The status document
is refreshed once it is a day old; the snapshot may only be fetched again
once it is at least five minutes old.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .config import FreshnessPolicy
from .enums import TimeUnit
from .storage import FileStorage


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def file_age(
    last_modified: datetime,
    unit: TimeUnit = TimeUnit.HOURS,
    now: Optional[datetime] = None,
) -> int:
    """
    Get the age of a resource in whole units.

    Elapsed time is truncated, so a file that is 4 minutes 59 seconds old
    is 4 minutes old. Modification times in the future count as age 0.

    Args:
        last_modified: Modification time of the resource (timezone-aware)
        unit: Unit to express the age in
        now: Reference time; defaults to the current UTC time

    Returns:
        Number of whole units elapsed since last_modified
    """
    if now is None:
        now = utc_now()
    elapsed = (now - last_modified).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // unit.seconds)


def needs_refresh(
    last_modified: Optional[datetime],
    max_age: int,
    unit: TimeUnit,
    now: Optional[datetime] = None,
) -> bool:
    """
    Decide whether a resource must be fetched again.

    Args:
        last_modified: Modification time, or None if the resource does not exist
        max_age: Threshold in whole units
        unit: Unit of max_age
        now: Reference time; defaults to the current UTC time

    Returns:
        True if the resource is missing or at least max_age units old
    """
    if last_modified is None:
        return True
    return file_age(last_modified, unit, now) >= max_age


class FreshnessGate:
    """Binds a FreshnessPolicy to a clock and a storage backend."""

    def __init__(self, policy: FreshnessPolicy, clock: Clock = utc_now) -> None:
        self._policy = policy
        self._clock = clock

    @property
    def policy(self) -> FreshnessPolicy:
        return self._policy

    def needs_refresh(self, last_modified: Optional[datetime]) -> bool:
        return needs_refresh(
            last_modified,
            self._policy.max_age,
            self._policy.unit,
            now=self._clock(),
        )

    def check(self, storage: FileStorage, path: Path) -> bool:
        """Check the persisted resource at path against the policy."""
        return self.needs_refresh(storage.last_modified(path))
