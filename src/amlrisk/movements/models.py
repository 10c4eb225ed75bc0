"""
Data structures for account movements.

Movements are created by the ingestion side (spreadsheet exports, database
rows) and are read-only for the risk engine.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Formats seen in operator exports, tried after ISO 8601
TIMESTAMP_FORMATS = (
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
    "%d-%m-%Y %H:%M:%S",
    "%d-%m-%Y",
    "%Y-%m-%d %H:%M:%S",
)


class MovementKind(str, Enum):
    """Classification of a movement by its reason text."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    WITHDRAWAL_CANCELLATION = "withdrawal_cancellation"
    OTHER = "other"


class Direction(str, Enum):
    """Money direction used for volume summaries."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values are returned as-is."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a raw timestamp into a naive datetime.

    Accepts datetime, date, ISO 8601 strings and the day-first formats
    used by Italian operator exports. Aware values are converted to UTC
    and stripped of their offset so mixed exports stay comparable.
    Returns None if unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    return None


def parse_amount(value: Any) -> Decimal:
    """
    Coerce a raw amount into a Decimal.

    Handles numbers and strings in either "1234.56" or "1.234,56" notation.
    Missing or invalid amounts contribute zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            logger.warning(f"Non-finite amount {value!r} treated as zero")
            return Decimal("0")
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace("€", "").replace(" ", "")
        if not text:
            return Decimal("0")
        if "," in text and text.rfind(",") > text.rfind("."):
            # Italian notation: dot for thousands, comma for decimals
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            logger.warning(f"Invalid amount {value!r} treated as zero")
            return Decimal("0")
    else:
        logger.warning(f"Unsupported amount type {type(value).__name__} treated as zero")
        return Decimal("0")

    if not amount.is_finite():
        logger.warning(f"Non-finite amount {value!r} treated as zero")
        return Decimal("0")

    return amount


@dataclass(frozen=True, eq=False)
class Movement:
    """
    One financial event on a player account.

    Compared by identity: two rows with identical fields are still two
    distinct movements.
    """

    timestamp: Optional[datetime]
    reason: str
    amount: Decimal = Decimal("0")
    payment_method: Optional[str] = None
    reference_id: Optional[str] = None

    def __post_init__(self):
        if self.timestamp is not None:
            object.__setattr__(self, "timestamp", to_naive_utc(self.timestamp))

    @property
    def volume(self) -> Decimal:
        """Absolute amount used for volume math."""
        return abs(self.amount)

    @property
    def has_valid_timestamp(self) -> bool:
        return self.timestamp is not None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Movement":
        """
        Build a movement from a loosely-typed record.

        Recognizes both English keys and the Italian export headers
        (data, causale, importo, TSN).
        """
        timestamp = parse_timestamp(raw.get("timestamp", raw.get("data")))
        if timestamp is None:
            logger.debug(f"Unparseable timestamp in movement record: {raw!r}")

        reason = raw.get("reason", raw.get("causale")) or ""
        method = (
            raw.get("payment_method")
            or raw.get("method")
            or raw.get("metodo")
        )
        reference = (
            raw.get("reference_id")
            or raw.get("TSN")
            or raw.get("TS extension")
        )

        return cls(
            timestamp=timestamp,
            reason=str(reason),
            amount=parse_amount(raw.get("amount", raw.get("importo"))),
            payment_method=str(method) if method else None,
            reference_id=str(reference) if reference else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "reason": self.reason,
            "amount": str(self.amount),
            "payment_method": self.payment_method,
            "reference_id": self.reference_id,
        }


@dataclass(frozen=True)
class FractionationGroup:
    """
    A cluster of movements split to stay under reporting limits.

    The engine only uses the presence of groups as a signal.
    """

    window_start: date
    window_end: date
    total: Decimal
    movements: tuple[Movement, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "total": str(self.total),
            "movements": [m.to_dict() for m in self.movements],
        }
