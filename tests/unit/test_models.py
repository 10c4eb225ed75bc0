"""
Unit tests for movement parsing.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from amlrisk.movements.models import Movement, parse_amount, parse_timestamp


class TestParseTimestamp:
    """Tests for timestamp coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-03-11T10:00:00", datetime(2024, 3, 11, 10, 0)),
            ("2024-03-11 10:00:00", datetime(2024, 3, 11, 10, 0)),
            ("11/03/2024 10:00:00", datetime(2024, 3, 11, 10, 0)),
            ("11/03/2024", datetime(2024, 3, 11)),
            ("11-03-2024", datetime(2024, 3, 11)),
            (date(2024, 3, 11), datetime(2024, 3, 11)),
        ],
    )
    def test_formats(self, value, expected):
        assert parse_timestamp(value) == expected

    def test_utc_suffix_is_naive_utc(self):
        parsed = parse_timestamp("2024-03-11T10:00:00Z")
        assert parsed == datetime(2024, 3, 11, 10, 0)
        assert parsed.tzinfo is None

    def test_offset_is_converted_to_utc(self):
        parsed = parse_timestamp("2024-03-11T23:30:00+02:00")
        assert parsed == datetime(2024, 3, 11, 21, 30)
        assert parsed.tzinfo is None

    def test_aware_datetime_is_converted(self):
        aware = datetime(2024, 3, 11, 10, 0, tzinfo=timezone(timedelta(hours=1)))
        assert parse_timestamp(aware) == datetime(2024, 3, 11, 9, 0)

    def test_mixed_formats_are_comparable(self):
        """ISO with offset and day-first exports sort together."""
        parsed = [
            parse_timestamp("12/03/2024 10:00"),
            parse_timestamp("2024-03-11T10:00:00Z"),
            parse_timestamp(date(2024, 3, 10)),
        ]

        assert sorted(parsed) == [
            datetime(2024, 3, 10),
            datetime(2024, 3, 11, 10, 0),
            datetime(2024, 3, 12, 10, 0),
        ]

    @pytest.mark.parametrize("value", [None, "", "yesterday", 12345, "31/02/2024"])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


class TestParseAmount:
    """Tests for amount coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (100, "100"),
            (-25.5, "-25.5"),
            ("1234.56", "1234.56"),
            ("1.234,56", "1234.56"),
            ("1,234.56", "1234.56"),
            ("€ 50,00", "50.00"),
            ("-200", "-200"),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_amount(value) == Decimal(expected)

    @pytest.mark.parametrize("value", [None, "", "abc", float("nan"), "Infinity", True])
    def test_invalid_is_zero(self, value):
        assert parse_amount(value) == Decimal("0")


class TestMovement:
    """Tests for the Movement record."""

    def test_identity_equality(self):
        ts = datetime(2024, 3, 11)
        first = Movement(ts, "Deposito", Decimal("10"))
        second = Movement(ts, "Deposito", Decimal("10"))

        assert first != second
        assert first == first

    def test_aware_timestamp_is_normalized(self):
        movement = Movement(
            datetime(2024, 3, 11, 10, 0, tzinfo=timezone.utc), "Deposito", Decimal("10")
        )

        assert movement.timestamp == datetime(2024, 3, 11, 10, 0)
        assert movement.timestamp.tzinfo is None

    def test_volume_is_absolute(self):
        assert Movement(None, "Prelievo", Decimal("-75")).volume == Decimal("75")

    def test_from_raw_english_keys(self):
        movement = Movement.from_raw({
            "timestamp": "2024-03-11T10:00:00",
            "reason": "Deposito safecharge",
            "amount": "150.00",
            "method": "Card",
            "reference_id": "T1",
        })

        assert movement.timestamp == datetime(2024, 3, 11, 10, 0)
        assert movement.amount == Decimal("150.00")
        assert movement.payment_method == "Card"
        assert movement.reference_id == "T1"

    def test_from_raw_italian_headers(self):
        movement = Movement.from_raw({
            "data": "11/03/2024 10:00:00",
            "causale": "Prelievo voucher",
            "importo": "-1.200,50",
            "TSN": 998877,
        })

        assert movement.reason == "Prelievo voucher"
        assert movement.amount == Decimal("-1200.50")
        assert movement.reference_id == "998877"
        assert movement.has_valid_timestamp

    def test_from_raw_bad_timestamp(self):
        movement = Movement.from_raw({"timestamp": "n/a", "reason": "Deposito"})

        assert not movement.has_valid_timestamp
        assert movement.amount == Decimal("0")
