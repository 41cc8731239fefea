from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

from dotenv import load_dotenv

from pwa_audit.app_factory import create_audit_service
from pwa_audit.cli.args import parse_args
from pwa_audit.cli.template import CONFIG_FILENAME, CONFIG_TEMPLATE
from pwa_audit.config import EnvOverrides, load_config
from pwa_audit.logging_setup import setup_logging
from pwa_audit.services.audit_service import AuditService

log = logging.getLogger(__name__)


def init_command(force: bool = False, cwd: Optional[Path] = None) -> int:
    """Write the template config. Always exits 0; a failed write is only logged."""
    config_path = (cwd or Path.cwd()).resolve() / CONFIG_FILENAME

    if config_path.exists() and not force:
        log.info("Config file already exists: %s", config_path)
        log.info("Use --force to overwrite.")
        return 0

    try:
        config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as e:
        log.error("Could not write config file %s: %s", config_path, e)
        return 0

    log.info("Created config file: %s", config_path)
    log.info("Edit the file to configure your URLs, thresholds, and tests.")
    return 0


def run_command(
    config_path: str,
    *,
    environ=None,
    service_factory: Callable[[], AuditService] = create_audit_service,
) -> int:
    """
    Load config and run the whole audit. Only pipeline-level exceptions give exit code 1;
    failed audits and failed tests are recorded in the output file instead.
    """
    try:
        log.info("Loading config from: %s", config_path)
        env = EnvOverrides.from_environ(os.environ if environ is None else environ)
        config = load_config(config_path, env)
        setup_logging(config.log_level)

        log.info("Config loaded successfully.")
        log.info("URLs: %s", config.urls)
        log.info("Output dir: %s", config.output_dir)

        service_factory().run(config)

        log.info("Audit run complete.")
        return 0
    except Exception as e:
        log.error("Error: %s", e, exc_info=log.isEnabledFor(logging.DEBUG))
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(Path.cwd() / ".env", override=False)
    setup_logging(os.getenv("LOG_LEVEL") or "info")

    args = parse_args(argv)
    if args.command == "init":
        return init_command(force=args.force)
    return run_command(args.config)
