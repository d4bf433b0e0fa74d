"""Batch job that resolves and stores metadata for a set of catalog films."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from kinolink.config import settings
from kinolink.schemas.movie import SourceRecord
from kinolink.services.metadata_orchestrator import MetadataOrchestrator
from kinolink.services.movie_store import MovieStore
from kinolink.services.refresh_scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


class RecordOutcome(str, Enum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class BatchSummary:
    """Per-outcome record counts for one batch."""

    resolved: int = 0
    unresolved: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: int = 0
    outcomes: dict[int, RecordOutcome] = field(default_factory=dict)

    def record(self, source_id: int, outcome: RecordOutcome) -> None:
        self.outcomes[source_id] = outcome
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)

    @property
    def total(self) -> int:
        return self.resolved + self.unresolved + self.skipped + self.failed


async def resolve_record(
    source: SourceRecord,
    orchestrator: MetadataOrchestrator,
    store: MovieStore,
    scheduler: RefreshScheduler,
    now: datetime,
) -> RecordOutcome:
    """
    Run one film through the refresh policy, resolution and the store.

    Returns:
        Outcome of the record. A failed service leaves the stored record untouched.
    """
    existing = await store.get(source.source_id)

    decision = scheduler.decide(existing, now)
    if not decision.should_resolve:
        logger.debug(f"Skipping {source.source_id}: {decision.reason.value}")
        return RecordOutcome.SKIPPED

    resolution = await orchestrator.resolve_movie(source, existing, now)
    if resolution.failed or resolution.merged is None:
        logger.warning(f"Resolution failed for {source.source_id} ({source.title!r}), not storing")
        return RecordOutcome.FAILED

    await store.upsert(resolution.merged)

    if resolution.resolved:
        return RecordOutcome.RESOLVED
    return RecordOutcome.UNRESOLVED


async def run_resolution_batch(
    sources: Iterable[SourceRecord],
    orchestrator: MetadataOrchestrator,
    store: MovieStore,
    scheduler: RefreshScheduler,
    concurrency: int | None = None,
    cancel_event: asyncio.Event | None = None,
    now: datetime | None = None,
) -> BatchSummary:
    """
    Resolve a batch of films concurrently.

    At most `concurrency` films are in flight at once. Setting `cancel_event`
    stops films that have not started yet; films already running finish.
    One film failing never stops the batch.

    Args:
        sources: Catalog films (duplicates by source_id are processed once)
        orchestrator: Per-film resolution
        store: Merged record store
        scheduler: Refresh policy
        concurrency: Parallel films (uses settings if not provided)
        cancel_event: Cancellation signal checked before each film starts
        now: Batch clock (defaults to current UTC time)

    Returns:
        Outcome counts
    """
    now = now or datetime.now(UTC)
    semaphore = asyncio.Semaphore(concurrency or settings.batch_concurrency)
    summary = BatchSummary()

    unique: dict[int, SourceRecord] = {}
    for source in sources:
        unique.setdefault(source.source_id, source)

    logger.info(f"Resolving {len(unique)} films")

    async def process(source: SourceRecord) -> None:
        async with semaphore:
            if cancel_event is not None and cancel_event.is_set():
                summary.cancelled += 1
                return
            try:
                outcome = await resolve_record(source, orchestrator, store, scheduler, now)
            except Exception as e:
                logger.error(f"Error resolving {source.source_id} ({source.title!r}): {e}", exc_info=True)
                outcome = RecordOutcome.FAILED
            summary.record(source.source_id, outcome)

    await asyncio.gather(*(process(source) for source in unique.values()))

    logger.info(
        f"Resolution batch complete: {summary.resolved} resolved, "
        f"{summary.unresolved} unresolved, {summary.skipped} skipped, "
        f"{summary.failed} failed, {summary.cancelled} cancelled"
    )
    return summary


async def run_resolve_all(
    sources: Iterable[SourceRecord],
    cancel_event: asyncio.Event | None = None,
) -> BatchSummary:
    """Resolve films with the default services, store and refresh policy."""
    return await run_resolution_batch(
        sources,
        orchestrator=MetadataOrchestrator(),
        store=MovieStore(),
        scheduler=RefreshScheduler(),
        cancel_event=cancel_event,
    )
