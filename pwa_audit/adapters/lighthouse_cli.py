from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pwa_audit.domain.models import ScoringFailure, ScoringOutcome, ScoringSuccess

NO_RESULTS = "Lighthouse returned no results"


def _stderr_tail(text: str, lines: int = 5) -> str:
    return "\n".join((text or "").strip().splitlines()[-lines:])


def scores_from_report(report: Optional[Dict[str, Any]]) -> ScoringOutcome:
    """
    Pull one score per returned category out of a Lighthouse JSON report.
    A null score counts as 0. Categories not in the report are left out.
    """
    if not isinstance(report, dict) or not isinstance(report.get("categories"), dict):
        return ScoringFailure(NO_RESULTS)

    scores: Dict[str, float] = {}
    for key, category in report["categories"].items():
        score = category.get("score") if isinstance(category, dict) else None
        scores[key] = score if score is not None else 0
    return ScoringSuccess(scores)


@dataclass
class LighthouseCli:
    """
    Adapter around the `lighthouse` command line.
    Attaches to an already running Chrome via --port and reads the JSON report from stdout.
    """
    lighthouse_bin: str = "lighthouse"
    timeout_seconds: int = 180
    run_command: Optional[Callable[..., subprocess.CompletedProcess]] = None

    def build_command(self, url: str, port: int, categories: List[str]) -> List[str]:
        return [
            self.lighthouse_bin,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={','.join(categories)}",
            "--quiet",
        ]

    def run(self, url: str, port: int, categories: List[str]) -> ScoringOutcome:
        """Raises on spawn errors and timeouts; the caller decides how to degrade."""
        run = self.run_command or subprocess.run
        proc = run(
            self.build_command(url, port, categories),
            capture_output=True,
            text=True,
            timeout=self.timeout_seconds,
        )

        if proc.returncode != 0:
            reason = _stderr_tail(proc.stderr) or f"exit code {proc.returncode}"
            return ScoringFailure(f"Lighthouse failed: {reason}")

        stdout = (proc.stdout or "").strip()
        if not stdout:
            return ScoringFailure(NO_RESULTS)
        try:
            report = json.loads(stdout)
        except json.JSONDecodeError:
            return ScoringFailure(NO_RESULTS)

        return scores_from_report(report)
