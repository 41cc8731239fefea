from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from pwa_audit.domain.models import AuditConfig, CustomTest, PlaywrightTestResult

log = logging.getLogger(__name__)

TEST_TIMEOUT_SECONDS = 60
MAX_ERROR_CHARS = 500
URLS_ENV_VAR = "PWA_AUDIT_URLS"


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass
class PlaywrightTestService:
    """
    Runs each configured custom test file as its own subprocess and records pass/fail.
    Test files get the configured URLs as JSON in PWA_AUDIT_URLS.
    """
    timeout_seconds: int = TEST_TIMEOUT_SECONDS
    python_bin: str = sys.executable
    run_command: Optional[Callable[..., subprocess.CompletedProcess]] = None
    base_env: Optional[Mapping[str, str]] = None

    def build_command(self, test_path: Path) -> List[str]:
        if test_path.suffix.lower() == ".py":
            return [self.python_bin, "-m", "pytest", str(test_path), "-q"]
        return ["npx", "playwright", "test", str(test_path), "--reporter=json"]

    def run(self, config: AuditConfig) -> List[PlaywrightTestResult]:
        results: List[PlaywrightTestResult] = []

        if not config.custom_tests:
            log.info("No custom tests configured. Skipping.")
            return results

        log.info("Running %d custom test(s)...", len(config.custom_tests))

        env = dict(self.base_env if self.base_env is not None else os.environ)
        env[URLS_ENV_VAR] = json.dumps(config.urls)

        for test in config.custom_tests:
            results.append(self._run_one(test, env))

        passed = sum(1 for r in results if r.passed)
        log.info("Done: %d/%d test(s) passed.", passed, len(results))
        return results

    def _run_one(self, test: CustomTest, env: dict) -> PlaywrightTestResult:
        test_path = Path(test.path).resolve()

        if not test_path.exists():
            log.warning("Test file not found: %s", test_path)
            return PlaywrightTestResult(
                file=test.path,
                type=test.type,
                passed=False,
                error=f"File not found: {test_path}",
            )

        log.info("Running: %s (type: %s)", test.path, test.type)
        run = self.run_command or subprocess.run
        cmd = self.build_command(test_path)

        try:
            proc = run(
                cmd,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            error = _as_text(e.stderr).strip() or f"Timed out after {self.timeout_seconds}s: {' '.join(cmd)}"
            return self._failed(test, error)
        except OSError as e:
            return self._failed(test, str(e))

        if proc.returncode == 0:
            log.info("PASSED %s", test.path)
            return PlaywrightTestResult(file=test.path, type=test.type, passed=True)

        error = _as_text(proc.stderr).strip() or f"Command failed with exit code {proc.returncode}: {' '.join(cmd)}"
        return self._failed(test, error)

    @staticmethod
    def _failed(test: CustomTest, error: str) -> PlaywrightTestResult:
        log.info("FAILED %s", test.path)
        return PlaywrightTestResult(
            file=test.path,
            type=test.type,
            passed=False,
            error=error[:MAX_ERROR_CHARS],
        )
