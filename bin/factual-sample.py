#!/usr/bin/env python3
"""Sample values from (or check values against) a declarative fact document.

Loads a YAML fact document (see factual.declarative), then either builds
values that satisfy it and prints them as JSON lines, or, with --check, reads
JSON lines from stdin and reports every violation.

Configuration (CLI args take precedence over env vars):
    --count     Values to generate        (env: FACTUAL_COUNT,            default: 1)
    --seed      Entropy seed              (env: FACTUAL_SEED,             default: random, logged)
    --attempts  satisfy() attempt budget  (env: FACTUAL_SATISFY_ATTEMPTS, default: 7)

Exit status:
    0  all values generated / all checked values pass
    1  --check found at least one violation
    2  the document is malformed, stdin is not JSON lines, a value has the
       wrong shape for the fact (e.g. a number where a list is expected), or
       the fact could not be satisfied

Usage:
    bin/factual-sample.py user.yaml --count 5 --seed 42
    bin/factual-sample.py user.yaml --check < users.jsonl
    FACTUAL_SEED=7 bin/factual-sample.py user.yaml
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, TextIO

from factual.declarative import load_fact_file
from factual.entropy import SeededEntropy
from factual.errors import FactError
from factual.limits import SATISFY_ATTEMPTS
from factual.satisfy import build_seq, check_seq

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with environment variable fallbacks.

    Priority (highest → lowest):
        1. Explicit CLI flag (e.g. --seed 42)
        2. Environment variable (e.g. FACTUAL_SEED=42)
        3. Built-in default

    Args:
        argv: Argument list to parse. If None, reads from sys.argv[1:].

    Returns:
        Parsed namespace with .document, .count, .seed, .attempts, .check.
    """
    parser = argparse.ArgumentParser(
        description="Generate or check values against a declarative fact document.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment variables:\n"
            "  FACTUAL_COUNT             Values to generate (default: 1)\n"
            "  FACTUAL_SEED              Entropy seed (default: random, logged)\n"
            f"  FACTUAL_SATISFY_ATTEMPTS  satisfy() attempt budget (default: {SATISFY_ATTEMPTS})\n"
        ),
    )
    parser.add_argument("document", metavar="DOCUMENT", help="YAML fact document")
    parser.add_argument(
        "--count",
        type=int,
        default=os.environ.get("FACTUAL_COUNT", "1"),
        metavar="N",
        help="number of values to generate (env: FACTUAL_COUNT, default: 1)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=os.environ.get("FACTUAL_SEED"),
        metavar="S",
        help="entropy seed (env: FACTUAL_SEED, default: random)",
    )
    parser.add_argument(
        "--attempts",
        type=int,
        default=os.environ.get("FACTUAL_SATISFY_ATTEMPTS", str(SATISFY_ATTEMPTS)),
        metavar="K",
        help=f"satisfy() attempt budget (env: FACTUAL_SATISFY_ATTEMPTS, default: {SATISFY_ATTEMPTS})",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="read JSON lines from stdin and check them instead of generating",
    )
    return parser.parse_args(argv)


def read_json_lines(stream: TextIO) -> list[Any]:
    """Parse one JSON value per non-blank line.

    Raises:
        ValueError: If a line is not valid JSON; the message names the line.
    """
    values = []
    for lineno, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            values.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise ValueError(f"stdin line {lineno}: invalid JSON: {e.msg}") from e
    return values


def main(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the sampler. Returns the process exit status."""
    args = parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    try:
        document = load_fact_file(args.document)
        if args.check:
            result = check_seq(document.fact, read_json_lines(stdin))
            for message in result.messages:
                print(message, file=stdout)
            logger.info("Checked %s: %d violation(s)", args.document, len(result))
            return 0 if result.ok else 1

        entropy = SeededEntropy(args.seed)
        values = build_seq(
            document.fact, document.like, args.count, entropy, attempts=args.attempts
        )
    except (FactError, ValueError, TypeError) as e:
        logger.error("%s", e)
        return 2

    for value in values:
        print(json.dumps(value), file=stdout)
    logger.info(
        "Generated %d value(s) from %s (seed=%d)", len(values), args.document, entropy.seed
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
