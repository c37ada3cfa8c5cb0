"""Detect potential duplicate transactions in the persisted store.

Two transactions are candidates when they share a vendor, lie at most one
day apart, have the same absolute amount and either the same normalized
name or the same first 20 characters of it. Manually entered transactions
(``manual_*`` vendors) are never considered.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import timedelta
from typing import Optional

from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    StoredTransaction,
    TransactionRef,
)

logger = logging.getLogger(__name__)

NAME_PREFIX_LENGTH = 20
MAX_DATE_DISTANCE = timedelta(days=1)
MANUAL_VENDOR_PREFIX = "manual_"

SCORE_SAME_IDENTIFIER = 1.0
SCORE_EXACT = 0.95
SCORE_PREFIX = 0.85
SCORE_LOOSE = 0.7


def similarity(first: StoredTransaction, second: StoredTransaction) -> Optional[float]:
    """Score a pair, or None when the two are not candidates at all."""
    if first.ref.vendor != second.ref.vendor:
        return None
    if abs(first.transaction_date - second.transaction_date) > MAX_DATE_DISTANCE:
        return None
    if abs(first.amount) != abs(second.amount):
        return None

    name1 = first.normalized_name
    name2 = second.normalized_name
    same_name = name1 == name2
    same_prefix = name1[:NAME_PREFIX_LENGTH] == name2[:NAME_PREFIX_LENGTH]
    if not (same_name or same_prefix):
        return None

    same_date = first.transaction_date == second.transaction_date
    if first.ref.identifier == second.ref.identifier:
        return SCORE_SAME_IDENTIFIER
    if same_name and same_date:
        return SCORE_EXACT
    if same_prefix and same_date:
        return SCORE_PREFIX
    return SCORE_LOOSE


class DuplicateDetector:
    """Find candidate pairs among stored transactions."""

    def __init__(self, min_similarity: float = SCORE_LOOSE):
        self._min_similarity = min_similarity

    def detect(
        self,
        transactions: Iterable[StoredTransaction],
        suppressed: Optional[set[tuple[TransactionRef, TransactionRef]]] = None,
        limit: Optional[int] = None,
    ) -> list[DuplicatePair]:
        """Return candidate pairs, newest first, then by score.

        Parameters
        ----------
        transactions
            Stored transactions to scan
        suppressed
            Pair keys (see ``DuplicatePair.key``) that were already resolved
        limit
            Optional maximum number of pairs returned
        """
        suppressed = suppressed or set()
        by_vendor: dict[str, list[StoredTransaction]] = defaultdict(list)
        for tx in transactions:
            if tx.ref.vendor.startswith(MANUAL_VENDOR_PREFIX):
                continue
            by_vendor[tx.ref.vendor].append(tx)

        pairs: list[DuplicatePair] = []
        for vendor_transactions in by_vendor.values():
            vendor_transactions.sort(key=lambda t: (t.transaction_date, t.ref))
            for i, first in enumerate(vendor_transactions):
                for second in vendor_transactions[i + 1 :]:
                    if second.transaction_date - first.transaction_date > MAX_DATE_DISTANCE:
                        break
                    pair = self._make_pair(first, second)
                    if pair is None or pair.key in suppressed:
                        continue
                    pairs.append(pair)

        pairs.sort(key=lambda p: (p.first_date, p.similarity), reverse=True)
        logger.debug("Detected %d duplicate candidates", len(pairs))
        if limit is not None:
            return pairs[:limit]
        return pairs

    def _make_pair(
        self,
        a: StoredTransaction,
        b: StoredTransaction,
    ) -> Optional[DuplicatePair]:
        score = similarity(a, b)
        if score is None or score < self._min_similarity:
            return None
        # The lower (identifier, vendor) is always reported first
        first, second = (a, b) if a.ref < b.ref else (b, a)
        return DuplicatePair(
            first=first.ref,
            second=second.ref,
            similarity=score,
            first_date=first.transaction_date,
            name=first.name,
        )
