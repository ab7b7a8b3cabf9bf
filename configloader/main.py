"""Command line entry point for configloader."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .errors import ConfigLoadError, ReadError
from .loader import ConfigLoader
from .log import get_logger, setup_logging
from .models import LoaderOptions
from .normalize import normalize

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="configloader",
        description="Normalize config files of any encoding to UTF-8 and load them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_norm = sub.add_parser("normalize", help="Write the UTF-8 normalized bytes of a file")
    p_norm.add_argument("src", type=Path, help="Config file to normalize")
    p_norm.add_argument("-o", "--output", type=Path, default=None, help="Output file (default: stdout)")

    p_show = sub.add_parser("show", help="Load a config file and print its settings as JSON")
    p_show.add_argument("src", type=Path, help="Config file to load")
    p_show.add_argument("--temp-dir", type=Path, default=None, help="Directory for staged artifacts")
    p_show.add_argument("--keep-temp", action="store_true", help="Keep the staged artifact for inspection")

    return parser


def run_normalize(src: Path, output: Optional[Path]) -> None:
    try:
        raw = src.read_bytes()
    except OSError as e:
        raise ReadError(f"Failed to read config file {src}: {e}") from e

    data = normalize(raw)
    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        output.write_bytes(data)
        logger.info(f"Wrote {len(data)} bytes to {output}")


def run_show(loader: ConfigLoader, src: Path) -> None:
    loader.load(src)
    if loader.artifact_path is not None:
        logger.info(f"Staged artifact kept at {loader.artifact_path}")
    print(json.dumps(loader.settings(), ensure_ascii=False, sort_keys=True, indent=2, default=str))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        if args.command == "normalize":
            run_normalize(args.src, args.output)
        else:
            loader = ConfigLoader(LoaderOptions(temp_directory=args.temp_dir, keep_temp_artifact=args.keep_temp))
            run_show(loader, args.src)
    except (ConfigLoadError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
