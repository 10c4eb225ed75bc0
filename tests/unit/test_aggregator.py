"""
Unit tests for volume aggregation.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from amlrisk.movements.models import Direction, Movement
from amlrisk.volumes.aggregator import Aggregator, day_key, month_key, week_key


@pytest.fixture
def aggregator() -> Aggregator:
    return Aggregator()


class TestBucketKeys:
    """Tests for calendar bucket keys."""

    def test_day_key(self):
        assert day_key(datetime(2024, 3, 5, 23, 59)) == "2024-03-05"

    def test_month_key(self):
        assert month_key(datetime(2024, 3, 5)) == "2024-03"

    def test_week_key_is_monday(self):
        assert week_key(datetime(2024, 3, 11, 8, 0)) == "2024-03-11"
        assert week_key(datetime(2024, 3, 14)) == "2024-03-11"

    def test_sunday_belongs_to_previous_monday(self):
        assert week_key(datetime(2024, 3, 17, 23, 0)) == "2024-03-11"

    def test_week_across_year_boundary(self):
        assert week_key(datetime(2023, 12, 31)) == "2023-12-25"
        assert week_key(datetime(2024, 1, 1)) == "2024-01-01"


class TestSummarize:
    """Tests for VolumeSummary computation."""

    def test_empty_returns_none(self, aggregator):
        assert aggregator.summarize([], Direction.DEPOSIT) is None

    def test_total_uses_absolute_amounts(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 100),
            make_movement("Deposito", -50),
            make_movement("Deposito", "25.50"),
        ]

        summary = aggregator.summarize(movements, Direction.DEPOSIT)

        assert summary.total == Decimal("175.50")
        assert summary.direction == Direction.DEPOSIT
        assert summary.transactions == movements

    def test_single_day_span_is_one(self, aggregator, make_movement):
        summary = aggregator.summarize(
            [make_movement("Deposito", 100), make_movement("Deposito", 100, hours=3)],
            Direction.DEPOSIT,
        )

        assert summary.span_days == 1
        assert summary.average_per_day == Decimal("200")

    def test_span_rounds_up(self, aggregator, make_movement):
        summary = aggregator.summarize(
            [make_movement("Deposito", 300), make_movement("Deposito", 300, hours=36)],
            Direction.DEPOSIT,
        )

        assert summary.span_days == 2
        assert summary.average_per_day == Decimal("300")

    def test_movements_without_timestamp_are_skipped(self, aggregator, make_movement):
        valid = make_movement("Deposito", 100)
        undated = Movement(timestamp=None, reason="Deposito", amount=Decimal("999"))

        summary = aggregator.summarize([valid, undated], Direction.DEPOSIT)

        assert summary.total == Decimal("100")
        assert summary.transactions == [valid]


class TestPeakWindow:
    """Tests for the rolling 7-day peak."""

    def test_window_end_is_inclusive(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 100, days=0),
            make_movement("Deposito", 200, days=3),
            make_movement("Deposito", 500, days=10),
            make_movement("Deposito", 50, days=12),
        ]

        peak = aggregator.peak_window(movements)

        # Window starting on day 3 reaches exactly day 10
        assert peak.value == Decimal("700")
        assert peak.start == movements[1].timestamp
        assert peak.end == movements[1].timestamp + timedelta(days=7)

    def test_earliest_window_wins_ties(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 100, days=0),
            make_movement("Deposito", 100, days=20),
        ]

        peak = aggregator.peak_window(movements)

        assert peak.start == movements[0].timestamp

    def test_unsorted_input(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 500, days=10),
            make_movement("Deposito", 100, days=0),
            make_movement("Deposito", 200, days=3),
        ]

        assert aggregator.peak_window(movements).value == Decimal("700")

    def test_zero_volume_has_no_peak(self, aggregator, make_movement):
        assert aggregator.peak_window([make_movement("Deposito", 0)]) is None


class TestMethodBreakdown:
    """Tests for the payment method breakdown."""

    def test_sorted_by_volume_with_percentages(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 100, method="PayPal"),
            make_movement("Deposito safecharge", 200),
            make_movement("Deposito carta", 100),
        ]

        shares = aggregator.method_breakdown(movements, Direction.DEPOSIT)

        assert [s.method for s in shares] == ["Card", "PayPal"]
        assert shares[0].volume == Decimal("300")
        assert shares[0].count == 2
        assert shares[0].percentage == pytest.approx(75.0)
        assert shares[1].percentage == pytest.approx(25.0)

    def test_zero_total(self, aggregator, make_movement):
        shares = aggregator.method_breakdown(
            [make_movement("Prelievo", 0)], Direction.WITHDRAWAL
        )

        assert shares[0].method == "Other"
        assert shares[0].percentage == 0.0


class TestBucketTotals:
    """Tests for day, week and month buckets."""

    def test_buckets(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 100, days=0),  # Monday 11th
            make_movement("Deposito", 200, days=6),  # Sunday 17th
            make_movement("Deposito", 300, days=7),  # Monday 18th
            make_movement("Deposito", 50, days=0, hours=5),
        ]

        buckets = aggregator.bucket_totals(movements)

        assert buckets.daily == {
            "2024-03-11": Decimal("150"),
            "2024-03-17": Decimal("200"),
            "2024-03-18": Decimal("300"),
        }
        assert buckets.weekly == {
            "2024-03-11": Decimal("350"),
            "2024-03-18": Decimal("300"),
        }
        assert buckets.monthly == {"2024-03": Decimal("650")}

    def test_keys_are_chronological(self, aggregator, make_movement):
        movements = [
            make_movement("Deposito", 10, days=40),
            make_movement("Deposito", 10, days=0),
        ]

        buckets = aggregator.bucket_totals(movements)

        assert list(buckets.monthly) == ["2024-03", "2024-04"]
        assert list(buckets.daily) == ["2024-03-11", "2024-04-20"]
