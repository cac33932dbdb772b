"""CLI entry point for configuration introspection.

Usage:
    python -m prisma_engine.config
    python -m prisma_engine.config --json
"""

import argparse
from dataclasses import asdict
import json
import sys

from .api import resolve_config

# ruff: noqa: T201


def main(argv: list[str] | None = None) -> int:
    """Print the effective configuration and where each value came from."""
    parser = argparse.ArgumentParser(
        description="Inspect prisma-engine-commands configuration",
        prog="python -m prisma_engine.config",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of human-readable format",
    )
    args = parser.parse_args(argv)

    try:
        resolved = resolve_config()
    except Exception as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        payload = {
            "config": asdict(resolved.to_frozen()),
            "sources": dict(resolved.origin),
        }
        print(json.dumps(payload, indent=2))
    else:
        print("=== Effective Configuration ===")
        print(resolved.audit())
    return 0


if __name__ == "__main__":
    sys.exit(main())
