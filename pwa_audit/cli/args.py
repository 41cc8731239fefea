from __future__ import annotations

import argparse
from typing import List, Optional

from pwa_audit import __version__
from pwa_audit.cli.template import CONFIG_FILENAME


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pwa-audit",
        description="PWA Audit - Lighthouse + Playwright testing for Progressive Web Apps",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    run = sub.add_parser("run", help="Run PWA audits (Lighthouse + Playwright) against configured URLs")
    run.add_argument("-c", "--config", required=True, metavar="PATH", help="Path to config file (.js, .json or .ini)")

    init = sub.add_parser("init", help=f"Generate a template {CONFIG_FILENAME} in the current directory")
    init.add_argument("-f", "--force", action="store_true", default=False, help="Overwrite existing config file")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
