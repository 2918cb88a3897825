"""CLI entrypoint for evented."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
import json
from pathlib import Path

from .config import CONFIG_PATH, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evented",
        description="Inspect evented installation and configuration",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--show-config",
        nargs="?",
        const=str(CONFIG_PATH),
        metavar="PATH",
        help="Print the validated configuration as JSON",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("evented")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"evented {version}")
        return

    if args.show_config is not None:
        config = load_config(Path(args.show_config).expanduser())
        print(json.dumps(config, indent=2, sort_keys=True))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
