"""
Command-line evaluation of one account's movement export.

Usage:
    amlrisk-evaluate --input movements.json [--config config.json] [--pretty]

The input is a JSON list of movement objects (timestamp, reason, amount,
optional method and reference_id; Italian export headers also accepted).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from amlrisk.config import settings
from amlrisk.detection import AMLPatternScanner, FractionationDetector
from amlrisk.engine import RiskEngine
from amlrisk.movements.models import Movement
from amlrisk.risk.config import RiskConfig
from amlrisk.risk.config_source import StaticConfigProvider, build_config_provider

logger = logging.getLogger(__name__)


def load_movements(path: Path) -> list[Movement]:
    """Read a JSON movement export."""
    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    if isinstance(records, dict):
        records = records.get("movements", records.get("transactions", []))

    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a list of movements")

    return [Movement.from_raw(r) for r in records if isinstance(r, dict)]


def load_config(path: Path) -> RiskConfig:
    """Read a risk configuration file in the endpoint's JSON format."""
    with open(path, encoding="utf-8") as f:
        return RiskConfig.from_payload(json.load(f))


def evaluate_file(
    input_path: Path,
    config_path: Optional[Path] = None,
) -> dict:
    """Run upstream detection and the engine on a movement export."""
    movements = load_movements(input_path)
    logger.info(f"Loaded {len(movements)} movements from {input_path}")

    if config_path:
        provider = StaticConfigProvider(load_config(config_path))
    else:
        provider = build_config_provider(settings)

    detector = FractionationDetector()
    scanner = AMLPatternScanner()
    engine = RiskEngine(config_provider=provider)

    result = engine.evaluate(
        detector.detect_deposits(movements),
        detector.detect_withdrawals(movements),
        scanner.scan(movements),
        movements,
    )
    return result.to_dict()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Evaluate the AML risk of one account's movements",
    )
    parser.add_argument(
        "--input", "-i", type=Path, required=True,
        help="JSON file with the account movements",
    )
    parser.add_argument(
        "--config", "-c", type=Path, default=None,
        help="Risk configuration JSON (defaults to RISK_CONFIG_URL or built-in)",
    )
    parser.add_argument(
        "--pretty", action="store_true",
        help="Indent the JSON output",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        verdict = evaluate_file(args.input, args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Evaluation failed: {e}")
        return 1

    json.dump(verdict, sys.stdout, indent=2 if args.pretty else None, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
