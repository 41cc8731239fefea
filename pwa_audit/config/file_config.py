from __future__ import annotations

import json
import logging
import os
import re
from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pwa_audit.adapters.config_script import NodeConfigModuleLoader
from pwa_audit.domain.errors import ConfigNotFound, ConfigParseError, UnsupportedConfigFormat
from pwa_audit.domain.models import AuditConfig, CustomTest, ServiceEndpoints

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "./audit-reports"

DEFAULTS: Dict[str, Any] = {
    "urls": [],
    "thresholds": {"pwa": 0.9},
    "customTests": [],
    "services": {},
    "outputDir": DEFAULT_OUTPUT_DIR,
    "logLevel": "info",
}

SERVICE_NAMES = ("generator", "recorder", "reporter")

# Path segments appended to EXTERNAL_SERVICE_URL.
SERVICE_SUFFIXES = {
    "generator": "/generate",
    "recorder": "/record",
    "reporter": "/report",
}

SUPPORTED_EXTENSIONS = (".js", ".json", ".ini")


@dataclass(frozen=True)
class EnvOverrides:
    external_service_url: Optional[str] = None
    test_generator_url: Optional[str] = None
    recorder_url: Optional[str] = None
    reporter_url: Optional[str] = None
    log_level: Optional[str] = None

    @staticmethod
    def from_environ(environ: Mapping[str, str]) -> "EnvOverrides":
        def get(name: str) -> Optional[str]:
            return (environ.get(name) or "").strip() or None

        return EnvOverrides(
            external_service_url=get("EXTERNAL_SERVICE_URL"),
            test_generator_url=get("TEST_GENERATOR_URL"),
            recorder_url=get("RECORDER_URL"),
            reporter_url=get("REPORTER_URL"),
            log_level=get("LOG_LEVEL"),
        )

    def specific_services(self) -> Dict[str, Optional[str]]:
        return {
            "generator": self.test_generator_url,
            "recorder": self.recorder_url,
            "reporter": self.reporter_url,
        }


def load_config(
    config_path: str,
    env: Optional[EnvOverrides] = None,
    *,
    script_loader: Optional[NodeConfigModuleLoader] = None,
) -> AuditConfig:
    """
    Load a .js, .json or .ini config file and resolve it into an AuditConfig.

    Merge order: DEFAULTS < file < environment. `services` is merged per key.
    """
    env = env or EnvOverrides()
    resolved = Path(os.path.expanduser(config_path)).resolve()

    if not resolved.is_file():
        raise ConfigNotFound(f"Config file not found: {resolved}")

    ext = resolved.suffix.lower()
    if ext == ".js":
        file_config = (script_loader or NodeConfigModuleLoader()).load(resolved)
    elif ext == ".json":
        file_config = _read_json(resolved)
    elif ext == ".ini":
        file_config = _read_ini(resolved)
    else:
        raise UnsupportedConfigFormat(
            f"Unsupported config file extension: {ext or '(none)'}. "
            f"Use one of: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    merged = _merge(file_config)
    _apply_env_overrides(merged, env)
    _validate(merged)

    return _to_config(merged)


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigParseError(f"Config file {path} must contain a JSON object")
    return data


def _split_list(raw: str) -> List[str]:
    return [s.strip() for s in re.split(r"[,\n]", raw or "") if s.strip()]


def _read_ini(path: Path) -> Dict[str, Any]:
    """
    [audit]        urls, output_dir, log_level
    [thresholds]   <category> = <0..1>
    [custom_tests] <path> = <type>
    [services]     generator / recorder / reporter
    """
    # Raw values: URLs may carry %-escapes. Keys keep their case and only '=' separates,
    # so test paths survive as keys.
    cfg = ConfigParser(interpolation=None, delimiters=("=",))
    cfg.optionxform = str
    try:
        cfg.read(str(path), encoding="utf-8-sig")
        return _ini_to_dict(cfg, path)
    except ConfigParserError as e:
        raise ConfigParseError(f"Invalid INI in {path}: {e}") from e


def _ini_to_dict(cfg: ConfigParser, path: Path) -> Dict[str, Any]:
    data: Dict[str, Any] = {}

    if cfg.has_section("audit"):
        if cfg.has_option("audit", "urls"):
            data["urls"] = _split_list(cfg.get("audit", "urls"))
        output_dir = (cfg.get("audit", "output_dir", fallback="") or "").strip()
        if output_dir:
            data["outputDir"] = output_dir
        log_level = (cfg.get("audit", "log_level", fallback="") or "").strip()
        if log_level:
            data["logLevel"] = log_level

    if cfg.has_section("thresholds"):
        thresholds = {}
        for key in cfg.options("thresholds"):
            try:
                thresholds[key.lower()] = cfg.getfloat("thresholds", key)
            except ValueError as e:
                raise ConfigParseError(f"Threshold '{key}' in {path} is not a number") from e
        data["thresholds"] = thresholds

    if cfg.has_section("custom_tests"):
        data["customTests"] = [
            {"path": test_path.strip(), "type": (cfg.get("custom_tests", test_path) or "").strip()}
            for test_path in cfg.options("custom_tests")
        ]

    if cfg.has_section("services"):
        data["services"] = {
            name: (cfg.get("services", name, fallback="") or "").strip() or None
            for name in SERVICE_NAMES
        }

    return data


def _merge(file_config: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in file_config.items() if v is not None})

    file_services = file_config.get("services") or {}
    if not isinstance(file_services, dict):
        raise ConfigParseError("'services' must be an object")

    services: Dict[str, Optional[str]] = dict(DEFAULTS["services"])
    services.update({k: v for k, v in file_services.items() if v})
    merged["services"] = services
    return merged


def _apply_env_overrides(config: Dict[str, Any], env: EnvOverrides) -> None:
    services = config["services"]

    if env.external_service_url:
        base = env.external_service_url.rstrip("/")
        for name in SERVICE_NAMES:
            services[name] = services.get(name) or f"{base}{SERVICE_SUFFIXES[name]}"
    else:
        log.warning(
            "EXTERNAL_SERVICE_URL is not set. External features "
            "(test generation, recording, reporting) will be unavailable."
        )

    for name, value in env.specific_services().items():
        if value:
            services[name] = value

    if env.log_level:
        config["logLevel"] = env.log_level


def _validate(config: Dict[str, Any]) -> None:
    if not config.get("urls"):
        log.warning("No URLs configured. The audit will have nothing to test.")

    if not config.get("outputDir"):
        config["outputDir"] = DEFAULT_OUTPUT_DIR


def _to_config(data: Dict[str, Any]) -> AuditConfig:
    urls = data.get("urls") or []
    if not isinstance(urls, list) or not all(isinstance(u, str) for u in urls):
        raise ConfigParseError("'urls' must be a list of strings")

    thresholds = data.get("thresholds") or {}
    if not isinstance(thresholds, dict):
        raise ConfigParseError("'thresholds' must be an object of category -> score")
    try:
        thresholds = {str(k): float(v) for k, v in thresholds.items()}
    except (TypeError, ValueError) as e:
        raise ConfigParseError(f"Invalid threshold value: {e}") from e

    raw_tests = data.get("customTests") or []
    if not isinstance(raw_tests, list):
        raise ConfigParseError("'customTests' must be a list")
    custom_tests = []
    for entry in raw_tests:
        if not isinstance(entry, dict) or not entry.get("path"):
            raise ConfigParseError(f"Custom test entry needs a 'path': {entry!r}")
        custom_tests.append(CustomTest(path=str(entry["path"]), type=str(entry.get("type") or "")))

    services = data["services"]
    return AuditConfig(
        urls=list(urls),
        thresholds=thresholds,
        custom_tests=custom_tests,
        services=ServiceEndpoints(
            generator=services.get("generator"),
            recorder=services.get("recorder"),
            reporter=services.get("reporter"),
        ),
        output_dir=str(data["outputDir"]),
        log_level=data.get("logLevel"),
    )
