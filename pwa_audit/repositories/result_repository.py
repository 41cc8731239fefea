from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pwa_audit.domain.models import AuditRunOutput

log = logging.getLogger(__name__)


def result_filename(timestamp: str) -> str:
    safe = timestamp.replace(":", "-").replace(".", "-")
    return f"audit-result-{safe}.json"


@dataclass
class ResultRepository:
    """
    Repository pattern: owns where and how audit results land on disk.
    """
    indent: int = 2

    def save(self, output_dir: str, output: AuditRunOutput) -> Path:
        resolved_dir = Path(os.path.expanduser(output_dir)).resolve()

        if not resolved_dir.exists():
            resolved_dir.mkdir(parents=True, exist_ok=True)
            log.info("Created directory: %s", resolved_dir)

        path = resolved_dir / result_filename(output.timestamp)
        path.write_text(json.dumps(output.to_dict(), indent=self.indent), encoding="utf-8")
        log.info("Results saved to: %s", path)
        return path
