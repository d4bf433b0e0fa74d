"""Decide whether a stored film is stale enough to resolve again."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from kinolink.config import settings
from kinolink.schemas.movie import MergedRecord


class RefreshReason(str, Enum):
    NEW_RECORD = "new-record"
    RELEASE_WINDOW = "release-window"
    STALE = "stale"
    UNKNOWN_RELEASE = "unknown-release"
    FRESH_ENOUGH = "fresh-enough"


@dataclass(frozen=True)
class RefreshDecision:
    should_resolve: bool
    reason: RefreshReason


class RefreshScheduler:
    """
    Staleness policy for stored films.

    Metadata churns right after release and settles later:
    - release within the last 90 days (or upcoming): always resolve
    - released 90 to 365 days ago: resolve when stored 7+ days ago
    - older, or release date unknown: resolve when stored 14+ days ago
    """

    def __init__(
        self,
        release_window_days: int | None = None,
        recent_release_days: int | None = None,
        recent_refresh_days: int | None = None,
        archive_refresh_days: int | None = None,
    ) -> None:
        self.release_window = timedelta(days=release_window_days or settings.release_window_days)
        self.recent_release = timedelta(days=recent_release_days or settings.recent_release_days)
        self.recent_refresh = timedelta(days=recent_refresh_days or settings.recent_refresh_days)
        self.archive_refresh = timedelta(days=archive_refresh_days or settings.archive_refresh_days)

    def decide(self, existing: MergedRecord | None, now: datetime) -> RefreshDecision:
        """
        Decide whether to run resolution for a film.

        Args:
            existing: Record stored on a previous cycle, if any
            now: Current time (timezone-aware)

        Returns:
            Decision with the reason it was taken
        """
        if existing is None or existing.stored_at is None:
            return RefreshDecision(True, RefreshReason.NEW_RECORD)

        since_stored = _as_utc(now) - _as_utc(existing.stored_at)

        if existing.release_date is None:
            if since_stored >= self.archive_refresh:
                return RefreshDecision(True, RefreshReason.UNKNOWN_RELEASE)
            return RefreshDecision(False, RefreshReason.FRESH_ENOUGH)

        age = _as_utc(now).date() - existing.release_date
        if age <= self.release_window:
            return RefreshDecision(True, RefreshReason.RELEASE_WINDOW)

        interval = self.recent_refresh if age <= self.recent_release else self.archive_refresh
        if since_stored >= interval:
            return RefreshDecision(True, RefreshReason.STALE)
        return RefreshDecision(False, RefreshReason.FRESH_ENOUGH)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
