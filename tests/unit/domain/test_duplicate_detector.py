"""Unit tests for duplicate candidate detection."""

from datetime import date
from decimal import Decimal

from finsync.domain.duplicates.services import DuplicateDetector, similarity
from finsync.domain.duplicates.value_objects import StoredTransaction, TransactionRef


def _tx(identifier, name="Super Market", on=date(2024, 3, 10), amount="-120.50",
        vendor="max"):
    return StoredTransaction(
        ref=TransactionRef(identifier, vendor),
        name=name,
        transaction_date=on,
        amount=Decimal(amount),
    )


class TestSimilarity:
    def test_same_name_same_date_is_exact(self):
        assert similarity(_tx("a"), _tx("b")) == 0.95

    def test_name_comparison_ignores_case_and_whitespace(self):
        assert similarity(_tx("a", name="  SUPER market "), _tx("b")) == 0.95

    def test_same_prefix_same_date(self):
        first = _tx("a", name="Amazon Marketplace EU branch 1")
        second = _tx("b", name="Amazon Marketplace EU branch 2")

        assert similarity(first, second) == 0.85

    def test_one_day_apart_is_loose(self):
        assert similarity(_tx("a"), _tx("b", on=date(2024, 3, 11))) == 0.7

    def test_same_identifier_scores_highest(self):
        first = _tx("a")
        second = StoredTransaction(
            ref=TransactionRef("a", "max"),
            name="other name entirely",
            transaction_date=date(2024, 3, 10),
            amount=Decimal("120.50"),
        )
        # Matching identifiers still need a name match
        assert similarity(first, second) is None
        assert similarity(first, _tx("a")) == 1.0

    def test_sign_of_amount_is_ignored(self):
        assert similarity(_tx("a", amount="-10"), _tx("b", amount="10")) == 0.95

    def test_not_candidates(self):
        base = _tx("a")
        assert similarity(base, _tx("b", vendor="visaCal")) is None
        assert similarity(base, _tx("b", on=date(2024, 3, 12))) is None
        assert similarity(base, _tx("b", amount="-120.51")) is None
        assert similarity(base, _tx("b", name="Gas Station")) is None


class TestDuplicateDetector:
    def setup_method(self):
        self.detector = DuplicateDetector()

    def test_finds_pairs_with_lower_ref_first(self):
        pairs = self.detector.detect([_tx("z"), _tx("b")])

        assert len(pairs) == 1
        assert pairs[0].first == TransactionRef("b", "max")
        assert pairs[0].second == TransactionRef("z", "max")
        assert pairs[0].first_date == date(2024, 3, 10)
        assert pairs[0].name == "Super Market"

    def test_manual_vendors_are_skipped(self):
        pairs = self.detector.detect(
            [_tx("a", vendor="manual_cash"), _tx("b", vendor="manual_cash")],
        )

        assert pairs == []

    def test_suppressed_pairs_are_excluded(self):
        transactions = [_tx("a"), _tx("b")]
        pair = self.detector.detect(transactions)[0]

        assert self.detector.detect(transactions, suppressed={pair.key}) == []

    def test_sorted_newest_first_then_by_score(self):
        transactions = [
            _tx("old1", on=date(2024, 1, 5)),
            _tx("old2", on=date(2024, 1, 5)),
            _tx("new1", name="Cafe", on=date(2024, 3, 1)),
            _tx("new2", name="Cafe", on=date(2024, 3, 2)),
            _tx("new3", name="Cafe", on=date(2024, 3, 2)),
        ]

        pairs = self.detector.detect(transactions)

        assert [(p.first.identifier, p.second.identifier) for p in pairs] == [
            ("new2", "new3"),
            ("new1", "new2"),
            ("new1", "new3"),
            ("old1", "old2"),
        ]
        assert [p.similarity for p in pairs] == [0.95, 0.7, 0.7, 0.95]

    def test_limit(self):
        transactions = [_tx(str(i)) for i in range(4)]

        assert len(self.detector.detect(transactions)) == 6
        assert len(self.detector.detect(transactions, limit=2)) == 2

    def test_min_similarity_filters_loose_pairs(self):
        detector = DuplicateDetector(min_similarity=0.9)

        pairs = detector.detect([_tx("a"), _tx("b", on=date(2024, 3, 11))])

        assert pairs == []
