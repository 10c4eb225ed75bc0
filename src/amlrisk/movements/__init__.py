"""
Movement ingestion types, classification and reconciliation.

Provides:
- Movement and FractionationGroup data structures
- Keyword-based classification with swappable vocabularies
- Payment method detection
- Reconciliation of cancelled withdrawals
"""

from amlrisk.movements.models import (
    Direction,
    FractionationGroup,
    Movement,
    MovementKind,
    parse_amount,
    parse_timestamp,
)
from amlrisk.movements.classifier import (
    ClassificationStrategy,
    KeywordClassifier,
    KeywordTable,
    MethodCascade,
    detect_payment_method,
)
from amlrisk.movements.reconciler import Reconciler, ReconciliationResult

__all__ = [
    "Direction",
    "FractionationGroup",
    "Movement",
    "MovementKind",
    "parse_amount",
    "parse_timestamp",
    "ClassificationStrategy",
    "KeywordClassifier",
    "KeywordTable",
    "MethodCascade",
    "detect_payment_method",
    "Reconciler",
    "ReconciliationResult",
]
