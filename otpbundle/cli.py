from __future__ import annotations

"""
Command line entry point.

Usage:
  otpbundle compile [src/foo.app.src]
  otpbundle install [ebin/foo.app] target=/opt/erlang/lib force=1
  otpbundle clean
"""

import argparse
import os
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from otpbundle.core.app.api import clean_app, compile_app, install_app
from otpbundle.core.config.io import load_bundle_config
from otpbundle.core.config.paths import ProjectPaths
from otpbundle.core.descriptor.loader import find_descriptor
from otpbundle.core.errors import ConfigError
from otpbundle.core.logger import setup_logging
from otpbundle.core.ops_log import InstallJournal

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2


def _split_args(items: Sequence[str]) -> Tuple[Optional[str], Dict[str, str]]:
    """Positional words are `[descriptor] [key=value ...]` in any order."""
    descriptor: Optional[str] = None
    overrides: Dict[str, str] = {}
    for item in items:
        if "=" in item:
            key, _, value = item.partition("=")
            overrides[key.strip()] = value
        elif descriptor is None:
            descriptor = item
        else:
            raise ValueError(f"unexpected argument: {item}")
    return descriptor, overrides


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="otpbundle", description="Validate and install OTP application bundles")
    ap.add_argument("--root", default=".", help="Project root (default: current directory)")
    ap.add_argument("--config", default=None, help="Project config (default: <root>/rebar.config)")
    ap.add_argument("--log-dir", default=None, help="Also write a rotating log file here")
    ap.add_argument("--journal", default=None, help="Append one JSON line per operation to this file")
    ap.add_argument("-v", "--verbose", action="store_true")
    ap.add_argument("command", choices=["compile", "clean", "install"])
    ap.add_argument("args", nargs="*", metavar="[DESCRIPTOR] [key=value]", help="descriptor path (relative to --root) and target=/force=/otp_root= globals")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    logger = setup_logging(args.log_dir, verbose=bool(args.verbose))

    try:
        descriptor, overrides = _split_args(args.args)
    except ValueError as e:
        ap.print_usage(sys.stderr)
        logger.error(str(e))
        return EXIT_USAGE

    paths = ProjectPaths(args.root)
    try:
        cfg = load_bundle_config(args.config or paths.rebar_config, overrides)
    except ConfigError as e:
        logger.error(e.user_message)
        return EXIT_USAGE

    # a relative DESCRIPTOR is relative to --root, like the default lookup
    descriptor = paths.resolve(descriptor) if descriptor else find_descriptor(paths.root)
    if not descriptor:
        logger.error(f"No ebin/*.app or src/*.app.src found under {os.path.abspath(paths.root)}")
        return EXIT_USAGE

    journal = InstallJournal(path=args.journal) if args.journal else None
    if args.command == "compile":
        res = compile_app(cfg, descriptor, paths=paths, logger=logger, journal=journal)
    elif args.command == "clean":
        res = clean_app(cfg, descriptor, logger=logger, journal=journal)
    else:
        res = install_app(cfg, descriptor, paths=paths, logger=logger, journal=journal)
    return EXIT_OK if res.ok else EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
