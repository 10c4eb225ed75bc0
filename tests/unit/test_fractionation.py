"""
Unit tests for fractionation (structuring) detection.
"""

from datetime import date
from decimal import Decimal

import pytest

from amlrisk.detection.fractionation import FractionationDetector

DIRECT_CREDIT = "Ricarica conto gioco per accredito diretto"


@pytest.fixture
def detector() -> FractionationDetector:
    return FractionationDetector()


class TestDepositFractionation:
    """Tests for direct-credit deposit groups."""

    def test_reaching_threshold_forms_group(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 2000, days=0),
            make_movement(DIRECT_CREDIT, 2000, days=2),
            make_movement(DIRECT_CREDIT, 1000, days=4),
        ]

        groups = detector.detect_deposits(movements)

        assert len(groups) == 1
        group = groups[0]
        assert group.total == Decimal("5000")
        assert group.window_start == date(2024, 3, 11)
        assert group.window_end == date(2024, 3, 15)
        assert list(group.movements) == movements

    def test_below_threshold(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 2000, days=0),
            make_movement(DIRECT_CREDIT, 2999, days=3),
        ]

        assert detector.detect_deposits(movements) == []

    def test_window_is_seven_calendar_days(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 3000, days=0),
            make_movement(DIRECT_CREDIT, 3000, days=7),
        ]

        assert detector.detect_deposits(movements) == []

    def test_rest_of_trigger_day_is_absorbed(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 4000, days=0),
            make_movement(DIRECT_CREDIT, 1000, days=1, hours=1),
            make_movement(DIRECT_CREDIT, 500, days=1, hours=5),
            make_movement(DIRECT_CREDIT, 500, days=2),
        ]

        groups = detector.detect_deposits(movements)

        assert len(groups) == 1
        assert groups[0].total == Decimal("5500")
        assert len(groups[0].movements) == 3

    def test_scan_resumes_after_group(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 5000, days=0),
            make_movement(DIRECT_CREDIT, 2500, days=10),
            make_movement(DIRECT_CREDIT, 2500, days=11),
        ]

        groups = detector.detect_deposits(movements)

        assert [g.window_start for g in groups] == [date(2024, 3, 11), date(2024, 3, 21)]

    def test_later_start_can_trigger(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 1000, days=0),
            make_movement(DIRECT_CREDIT, 2500, days=6),
            make_movement(DIRECT_CREDIT, 2500, days=8),
        ]

        groups = detector.detect_deposits(movements)

        assert len(groups) == 1
        assert groups[0].window_start == date(2024, 3, 17)
        assert groups[0].total == Decimal("5000")

    def test_other_deposits_are_ignored(self, detector, make_movement):
        movements = [
            make_movement("Deposito safecharge", 6000),
            make_movement(DIRECT_CREDIT, 100, hours=1),
        ]

        assert detector.detect_deposits(movements) == []

    def test_unsorted_input(self, detector, make_movement):
        movements = [
            make_movement(DIRECT_CREDIT, 2500, days=3),
            make_movement(DIRECT_CREDIT, 2500, days=0),
        ]

        groups = detector.detect_deposits(movements)

        assert groups[0].window_start == date(2024, 3, 11)


class TestWithdrawalFractionation:
    """Tests for voucher and PVR withdrawal groups."""

    def test_voucher_withdrawals(self, detector, make_movement):
        movements = [
            make_movement("Prelievo voucher", -3000, days=0),
            make_movement("Prelievo presso PVR", -2000, days=1),
        ]

        groups = detector.detect_withdrawals(movements)

        assert len(groups) == 1
        assert groups[0].total == Decimal("5000")

    def test_card_withdrawals_are_ignored(self, detector, make_movement):
        movements = [make_movement("Prelievo carta di credito", -9000)]

        assert detector.detect_withdrawals(movements) == []

    def test_custom_threshold(self, make_movement):
        detector = FractionationDetector(threshold=Decimal("1000"))
        movements = [
            make_movement("Prelievo voucher", -600, days=0),
            make_movement("Prelievo voucher", -400, days=1),
        ]

        assert len(detector.detect_withdrawals(movements)) == 1
