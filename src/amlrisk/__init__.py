"""
AML Risk - anti-money-laundering risk engine for gaming accounts.

A library that turns the movement history of one player account into a
risk verdict:
- Classifies raw movements (deposits, withdrawals, cancellations, game play)
- Reconciles cancelled withdrawals against their originals
- Aggregates volumes by day, ISO week and month
- Escalates a base risk tier using configurable aggravating patterns
- Maps the final tier to a numeric score with human-readable motivations
"""

__version__ = "0.1.0"
