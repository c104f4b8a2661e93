"""`bundlestrap` command implementation."""

import argparse
import logging
import shlex
import sys
from pathlib import Path

from bundlestrap import __version__
from bundlestrap import pipeline
from bundlestrap.config import load_config
from bundlestrap.errors import ConfigError


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bundlestrap",
        description="Download the latest application bundle, unpack it and run it",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="JSON config file (default: $BUNDLESTRAP_CONFIG or ~/.bundlestrap/config.json)",
    )
    parser.add_argument("--url", dest="download_url", help="URL of the ZIP archive to run")
    parser.add_argument(
        "--staging-root",
        type=Path,
        help="Directory wiped and reused for downloads and extraction",
    )
    parser.add_argument(
        "--settings",
        dest="local_settings",
        type=Path,
        help="Local settings file copied into the bundle when present",
    )
    parser.add_argument(
        "--bundle-dir",
        dest="bundle_dir_name",
        help="Top-level directory name inside the archive (default: derived from the URL)",
    )
    parser.add_argument("--entry-point", help="Entry-point file inside the bundle (default: index.js)")
    parser.add_argument(
        "--runner",
        help="Command used to run the entry point, e.g. 'node --enable-source-maps'",
    )
    parser.add_argument(
        "--retries",
        dest="fetch_retries",
        type=int,
        help="Extra download attempts after a failure (default: 0)",
    )
    parser.add_argument(
        "--timeout",
        dest="fetch_timeout",
        type=float,
        help="Network timeout in seconds",
    )
    parser.add_argument(
        "--detach",
        action="store_true",
        help="Only report the application's exit code instead of exiting with it",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load config and run the pipeline."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    runner = tuple(shlex.split(args.runner)) if args.runner else None
    try:
        config = load_config(
            args.config,
            download_url=args.download_url,
            staging_root=args.staging_root,
            local_settings=args.local_settings,
            bundle_dir_name=args.bundle_dir_name,
            entry_point=args.entry_point,
            runner=runner,
            fetch_retries=args.fetch_retries,
            fetch_timeout=args.fetch_timeout,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return pipeline.run(config, detach=args.detach)


def entrypoint() -> None:
    """Console script entrypoint."""
    raise SystemExit(main())
