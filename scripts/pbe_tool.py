"""Script entry point for the legacypbe command line.

Usage:
    python scripts/pbe_tool.py families
    python scripts/pbe_tool.py encrypt --password sesame --in hello --json
    python scripts/pbe_tool.py -v selftest --vectors 50

Sets up logging, then hands the remaining arguments to legacypbe.cli.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from legacypbe.cli import main as cli_main


def main() -> int:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )
    args, rest = parser.parse_known_args()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    return cli_main(rest)


if __name__ == "__main__":
    raise SystemExit(main())
