"""Resolve one duplicate pair by hand."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from finsync.domain.duplicates.exceptions import (
    DuplicateAlreadyResolvedError,
    DuplicateNotFoundError,
    InvalidResolutionActionError,
)
from finsync.domain.duplicates.repositories import DuplicateRepository
from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateStatus,
    ResolutionAction,
    TransactionRef,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateResolutionResult:
    """What a resolution did."""

    pair: DuplicatePair
    action: ResolutionAction
    deleted: Optional[TransactionRef] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "action": self.action.value,
            "resolved_action": self.action.resolved_action,
            "deleted": self.deleted.to_dict() if self.deleted else None,
            "marked_as_not_duplicate": self.action is ResolutionAction.NOT_DUPLICATE,
        }


def parse_action(action: Union[str, ResolutionAction]) -> ResolutionAction:
    if isinstance(action, ResolutionAction):
        return action
    try:
        return ResolutionAction.parse(action)
    except ValueError as e:
        raise InvalidResolutionActionError(action) from e


class ResolveDuplicateCommand:
    """Apply exactly one of delete-first, delete-second or suppress to a pair."""

    def __init__(self, repository: DuplicateRepository):
        self._repo = repository

    async def execute(
        self,
        pair: DuplicatePair,
        action: Union[str, ResolutionAction],
    ) -> DuplicateResolutionResult:
        resolved = parse_action(action)
        if not pair.allows(resolved):
            raise InvalidResolutionActionError(resolved.value)

        async with self._repo.unit():
            return await self.apply(pair, resolved)

    async def apply(
        self,
        pair: DuplicatePair,
        action: ResolutionAction,
    ) -> DuplicateResolutionResult:
        """Resolve inside the caller's transactional unit."""
        existing = await self._repo.get_resolution(pair.first, pair.second)
        if existing is not None and existing.is_resolved:
            raise DuplicateAlreadyResolvedError(pair)

        for ref in (pair.first, pair.second):
            if not await self._repo.transaction_exists(ref):
                raise DuplicateNotFoundError(ref)

        to_delete = pair.to_delete(action)
        if to_delete is not None:
            await self._repo.delete_transaction(to_delete)
            status = DuplicateStatus.CONFIRMED_DUPLICATE
        else:
            status = DuplicateStatus.NOT_DUPLICATE

        await self._repo.record_resolution(pair, status, action.resolved_action)
        logger.info(
            "Resolved duplicate %s/%s <-> %s/%s as %s",
            pair.first.vendor,
            pair.first.identifier,
            pair.second.vendor,
            pair.second.identifier,
            action.resolved_action,
        )
        return DuplicateResolutionResult(pair=pair, action=action, deleted=to_delete)
