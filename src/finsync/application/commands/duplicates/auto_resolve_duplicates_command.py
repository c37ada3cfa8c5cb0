"""Bulk-resolve exact duplicates by keeping the first of each pair."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from finsync.application.commands.duplicates.resolve_duplicate_command import (
    ResolveDuplicateCommand,
)
from finsync.domain.duplicates.repositories import DuplicateRepository
from finsync.domain.duplicates.services import DuplicateDetector
from finsync.domain.duplicates.value_objects import (
    EXACT_DUPLICATE_THRESHOLD,
    DuplicatePair,
    ResolutionAction,
    TransactionRef,
)
from finsync.domain.shared.exceptions import DomainException

logger = logging.getLogger(__name__)


@dataclass
class AutoResolveResult:
    """Outcome of one auto-resolve pass."""

    dry_run: bool
    candidates: int = 0
    deleted: list[TransactionRef] = field(default_factory=list)
    skipped: int = 0

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "candidates": self.candidates,
            "deleted_count": self.deleted_count,
            "would_delete" if self.dry_run else "deleted": [
                ref.to_dict() for ref in self.deleted
            ],
            "skipped": self.skipped,
        }


class AutoResolveDuplicatesCommand:
    """Resolve every exact candidate with KEEP_FIRST.

    Each pair runs in its own nested transaction, so a failing pair leaves
    nothing behind and does not undo the pairs before it. Running it twice
    deletes nothing the second time.
    """

    def __init__(
        self,
        repository: DuplicateRepository,
        detector: DuplicateDetector | None = None,
        threshold: float = EXACT_DUPLICATE_THRESHOLD,
    ):
        self._repo = repository
        self._detector = detector or DuplicateDetector()
        self._threshold = threshold
        self._resolver = ResolveDuplicateCommand(repository)

    async def execute(self, dry_run: bool = False) -> AutoResolveResult:
        pairs = await self._exact_candidates()
        result = AutoResolveResult(dry_run=dry_run, candidates=len(pairs))

        # Transactions already removed in this pass; a chain a=b=c needs one
        # deletion per extra copy, not one per pair
        removed: set[TransactionRef] = set()
        for pair in pairs:
            if pair.first in removed or pair.second in removed:
                result.skipped += 1
                continue
            if dry_run:
                removed.add(pair.second)
                result.deleted.append(pair.second)
                continue
            try:
                async with self._repo.unit():
                    outcome = await self._resolver.apply(
                        pair,
                        ResolutionAction.KEEP_FIRST,
                    )
            except DomainException as e:
                logger.warning("Skipping duplicate pair: %s", e.message)
                result.skipped += 1
                continue
            if outcome.deleted is not None:
                removed.add(outcome.deleted)
                result.deleted.append(outcome.deleted)

        logger.info(
            "Auto-resolve%s: %d exact candidates, %d deleted, %d skipped",
            " (dry run)" if dry_run else "",
            result.candidates,
            result.deleted_count,
            result.skipped,
        )
        return result

    async def _exact_candidates(self) -> list[DuplicatePair]:
        transactions = await self._repo.list_transactions()
        resolutions = await self._repo.list_resolutions()
        suppressed = {
            DuplicatePair(r.first, r.second, r.similarity).key
            for r in resolutions
            if r.is_resolved
        }
        pairs = self._detector.detect(transactions, suppressed=suppressed)
        return [p for p in pairs if p.is_exact(self._threshold)]
