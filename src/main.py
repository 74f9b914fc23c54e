import argparse
import logging
import sys
from typing import List, Optional

from amount import POLICIES, SaturatingPolicy
from config import LOG_LEVELS, EngineConfig
from csv_io import write_accounts
from errors import PaymentsEngineError
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Replay a CSV of transactions and print the final client accounts as CSV.",
    )
    parser.add_argument("input_file", metavar="INPUT_FILE", help="CSV with columns type, client, tx, amount")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="stderr log level (default: WARNING)",
    )
    parser.add_argument(
        "--overflow-policy",
        default=SaturatingPolicy.name,
        choices=sorted(POLICIES),
        help="clamp balances at the representable bounds, or fail (default: saturate)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = EngineConfig.from_args(args)

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config)
    try:
        accounts = engine.process_file(args.input_file)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read {args.input_file}: {e}")
        return 1
    except PaymentsEngineError as e:
        logger.error(f"Processing aborted: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
