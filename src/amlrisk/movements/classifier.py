"""
Keyword-based movement classification.

Movement reasons are free text written by the operator's back office, so
classification is a cascade of case-insensitive substring checks. The
vocabularies live in KeywordTable and MethodCascade instances so new
languages can be added without touching aggregation code.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from amlrisk.movements.models import Direction, Movement, MovementKind

logger = logging.getLogger(__name__)

# A keyword is either a single substring or a group of substrings that
# must all be present.
Keyword = Union[str, tuple[str, ...]]

OTHER_METHOD = "Other"


def _contains(text: str, keyword: Keyword) -> bool:
    if isinstance(keyword, tuple):
        return all(part in text for part in keyword)
    return keyword in text


def _contains_any(text: str, keywords: tuple[Keyword, ...]) -> bool:
    return any(_contains(text, kw) for kw in keywords)


def _merge(first: tuple, second: tuple) -> tuple:
    return first + tuple(kw for kw in second if kw not in first)


@dataclass(frozen=True)
class KeywordTable:
    """Vocabulary used to recognize movement kinds in reason text."""

    deposit: tuple[Keyword, ...] = ()
    withdrawal: tuple[Keyword, ...] = ()
    cancellation: tuple[Keyword, ...] = ()
    game: tuple[Keyword, ...] = ()
    live: tuple[Keyword, ...] = ()
    bonus: tuple[Keyword, ...] = ()

    def merged(self, other: "KeywordTable") -> "KeywordTable":
        """Combine two vocabularies, keeping this table's keywords first."""
        return KeywordTable(
            deposit=_merge(self.deposit, other.deposit),
            withdrawal=_merge(self.withdrawal, other.withdrawal),
            cancellation=_merge(self.cancellation, other.cancellation),
            game=_merge(self.game, other.game),
            live=_merge(self.live, other.live),
            bonus=_merge(self.bonus, other.bonus),
        )


ITALIAN_KEYWORDS = KeywordTable(
    deposit=("ricarica", "deposito", "accredito"),
    withdrawal=("prelievo",),
    cancellation=("annullamento", "storno", "rimborso"),
    game=(
        "session",
        "giocata",
        "scommessa",
        "bingo",
        "poker",
        "casino live",
        "evolution",
        "gratta",
        "vinci",
    ),
    live=("live", "evolution"),
    bonus=("bonus",),
)

ENGLISH_KEYWORDS = KeywordTable(
    deposit=("deposit", "top-up", "top up"),
    withdrawal=("withdraw",),
    cancellation=("cancel", "refund", "chargeback", "reversal"),
    game=("wager", "bet placed", "game round", "slot"),
    live=("live dealer",),
    bonus=("bonus",),
)

DEFAULT_KEYWORDS = ITALIAN_KEYWORDS.merged(ENGLISH_KEYWORDS)


@dataclass(frozen=True)
class MethodCascade:
    """
    Ordered payment-method rules applied to one text field.

    The cascade only applies when the text contains one of `applies_to`
    (or always, if empty). The first matching rule wins; `fallback` is
    returned when the cascade applies but no rule matches.
    """

    rules: tuple[tuple[str, tuple[Keyword, ...]], ...]
    applies_to: tuple[Keyword, ...] = ()
    fallback: Optional[str] = None

    def match(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        lowered = text.lower()
        if self.applies_to and not _contains_any(lowered, self.applies_to):
            return None
        for label, keywords in self.rules:
            if _contains_any(lowered, keywords):
                return label
        return self.fallback


@dataclass(frozen=True)
class PaymentMethodTable:
    """Cascades for the method hint field and for the reason text."""

    hint: tuple[MethodCascade, ...] = ()
    reason: tuple[MethodCascade, ...] = ()


DEPOSIT_METHODS = PaymentMethodTable(
    hint=(
        MethodCascade(
            rules=(
                ("Card", ("safecharge", "novapay", "nuvei", "carta", "card")),
                ("Bank transfer", ("bonifico", "wire")),
                ("PayPal", ("paypal",)),
                ("Skrill", ("skrill",)),
                ("Neteller", ("neteller",)),
                ("Direct credit/Cash", ("contante", "cash", ("accredito", "diretto"))),
            ),
        ),
    ),
    reason=(
        MethodCascade(
            rules=(
                ("Direct credit/Cash", ("ricarica conto gioco per accredito diretto",)),
            ),
        ),
        MethodCascade(
            applies_to=("deposit",),
            rules=(
                ("Card", ("safecharge", "novapay", "nuvei", "carta", "card")),
                ("Bank transfer", ("bonifico", "wire transfer")),
                ("PayPal", ("paypal",)),
                ("Skrill", ("skrill",)),
                ("Neteller", ("neteller",)),
            ),
            # Card processors are the usual source of an unlabelled deposit
            fallback="Card",
        ),
    ),
)

WITHDRAWAL_METHODS = PaymentMethodTable(
    hint=(
        MethodCascade(
            rules=(
                ("Card", ("carta", "card")),
                ("Bank transfer", ("bonifico", "wire")),
                ("PayPal", ("paypal",)),
                ("Skrill", ("skrill",)),
                ("Neteller", ("neteller",)),
                ("Voucher/PVR", ("voucher", "pvr")),
                # Only the method field can say "accredito" on a withdrawal;
                # such reason text classifies as a deposit.
                ("Direct credit/Cash", ("contante", "cash", "accredito", "dirett")),
            ),
        ),
    ),
    reason=(
        MethodCascade(
            rules=(
                ("Card", ("carta", "card", "visa", "mastercard")),
                ("Bank transfer", ("bonifico", "wire transfer")),
                ("PayPal", ("paypal",)),
                ("Skrill", ("skrill",)),
                ("Neteller", ("neteller",)),
                ("Voucher/PVR", ("voucher", "pvr")),
                ("Direct credit/Cash", ("contante", "cash")),
            ),
        ),
    ),
)


def detect_payment_method(
    movement: Movement,
    table: PaymentMethodTable,
) -> str:
    """
    Normalize the payment method of a movement.

    Tries the method hint first, then the reason text, and defaults
    to "Other".
    """
    for cascade in table.hint:
        method = cascade.match(movement.payment_method)
        if method:
            return method

    for cascade in table.reason:
        method = cascade.match(movement.reason)
        if method:
            return method

    return OTHER_METHOD


class ClassificationStrategy(ABC):
    """Interface for turning reason text into engine signals."""

    @abstractmethod
    def classify(self, reason: Optional[str]) -> MovementKind:
        """Classify a movement reason."""
        pass

    @abstractmethod
    def is_game_play(self, reason: Optional[str]) -> bool:
        """True if the reason describes a game session or bet."""
        pass

    @abstractmethod
    def is_live_session(self, reason: Optional[str]) -> bool:
        """True if the reason describes a live-dealer session."""
        pass

    @abstractmethod
    def mentions_bonus(self, reason: Optional[str]) -> bool:
        """True if the reason mentions a bonus."""
        pass

    @abstractmethod
    def payment_method(self, movement: Movement, direction: Direction) -> str:
        """Normalized payment method label for a movement."""
        pass


class KeywordClassifier(ClassificationStrategy):
    """
    Classifier driven by swappable keyword tables.

    Rule order:
    1. deposit keyword -> DEPOSIT
    2. withdrawal and cancellation keywords -> WITHDRAWAL_CANCELLATION
    3. withdrawal keyword -> WITHDRAWAL
    4. anything else -> OTHER
    """

    def __init__(
        self,
        keywords: KeywordTable = DEFAULT_KEYWORDS,
        method_tables: Optional[dict[Direction, PaymentMethodTable]] = None,
    ):
        self.keywords = keywords
        self.method_tables = method_tables or {
            Direction.DEPOSIT: DEPOSIT_METHODS,
            Direction.WITHDRAWAL: WITHDRAWAL_METHODS,
        }

    def classify(self, reason: Optional[str]) -> MovementKind:
        if not reason:
            return MovementKind.OTHER

        text = reason.lower()

        if _contains_any(text, self.keywords.deposit):
            return MovementKind.DEPOSIT

        if _contains_any(text, self.keywords.withdrawal):
            if _contains_any(text, self.keywords.cancellation):
                return MovementKind.WITHDRAWAL_CANCELLATION
            return MovementKind.WITHDRAWAL

        return MovementKind.OTHER

    def is_game_play(self, reason: Optional[str]) -> bool:
        if not reason or self.classify(reason) != MovementKind.OTHER:
            return False
        text = reason.lower()
        if _contains_any(text, self.keywords.bonus):
            return False
        return _contains_any(text, self.keywords.game)

    def is_live_session(self, reason: Optional[str]) -> bool:
        if not reason:
            return False
        return _contains_any(reason.lower(), self.keywords.live)

    def mentions_bonus(self, reason: Optional[str]) -> bool:
        if not reason:
            return False
        return _contains_any(reason.lower(), self.keywords.bonus)

    def payment_method(self, movement: Movement, direction: Direction) -> str:
        table = self.method_tables.get(direction)
        if table is None:
            return OTHER_METHOD
        return detect_payment_method(movement, table)
