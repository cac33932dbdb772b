"""Command line front end for the engine commands.

Usage:
    python -m prisma_engine dmmf schema.prisma
    python -m prisma_engine config schema.prisma --engine ./query-engine
    python -m prisma_engine dml whole-dmmf.json
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from prisma_engine.commands import create_client
from prisma_engine.exceptions import EngineError

# ruff: noqa: T201


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run Prisma query engine commands",
        prog="python -m prisma_engine",
    )
    parser.add_argument(
        "command",
        choices=("dmmf", "config", "dml"),
        help="dmmf/config take a schema file; dml takes a {dmmf, config} JSON file",
    )
    parser.add_argument("path", type=Path, help="Input file")
    parser.add_argument("--engine", help="Path to the query engine binary")
    parser.add_argument("--cwd", help="Working directory for the engine process")
    parser.add_argument("--retry", type=int, help="Retry budget for transient failures")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


async def _run(args: argparse.Namespace) -> str:
    client = create_client()
    text = args.path.read_text(encoding="utf-8")

    if args.command == "dmmf":
        dmmf = await client.get_dmmf(
            text,
            cwd=args.cwd,
            prisma_path=args.engine,
            datamodel_path=str(args.path),
            retry=args.retry,
        )
        return json.dumps(dmmf.to_engine_dict(), indent=2)
    if args.command == "config":
        config = await client.get_config(
            text,
            cwd=args.cwd,
            prisma_path=args.engine,
            datamodel_path=str(args.path),
            retry=args.retry,
        )
        return json.dumps(config.to_engine_dict(), indent=2)
    return await client.dmmf_to_dml(
        json.loads(text), args.engine, cwd=args.cwd, retry=args.retry
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        output = asyncio.run(_run(args))
    except (EngineError, OSError, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
