"""List duplicate candidates and their tracked resolutions."""

from __future__ import annotations

from typing import Optional

from finsync.application.dtos.duplicates import DuplicateListDTO
from finsync.domain.duplicates.repositories import DuplicateRepository
from finsync.domain.duplicates.services import DuplicateDetector
from finsync.domain.duplicates.value_objects import DuplicatePair, DuplicateStatus

DEFAULT_LIMIT = 100


class ListDuplicatesQuery:
    """Detect candidates that have not been resolved yet."""

    def __init__(
        self,
        repository: DuplicateRepository,
        detector: Optional[DuplicateDetector] = None,
    ):
        self._repo = repository
        self._detector = detector or DuplicateDetector()

    async def execute(
        self,
        status: Optional[DuplicateStatus] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> DuplicateListDTO:
        transactions = await self._repo.list_transactions()
        resolutions = await self._repo.list_resolutions()
        suppressed = {
            DuplicatePair(r.first, r.second, r.similarity).key
            for r in resolutions
            if r.is_resolved
        }
        detected = self._detector.detect(
            transactions,
            suppressed=suppressed,
            limit=limit,
        )
        tracked = [r for r in resolutions if status is None or r.status is status]
        return DuplicateListDTO(detected=tuple(detected), tracked=tuple(tracked[:limit]))
