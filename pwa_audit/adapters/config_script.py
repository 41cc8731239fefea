from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pwa_audit.domain.errors import ConfigParseError

# Evaluates the module in its own process; only its exported value comes back, as JSON.
_NODE_EXPORT_SCRIPT = (
    "const cfg = require(process.argv[1]);"
    "process.stdout.write(JSON.stringify(cfg && cfg.default ? cfg.default : (cfg || {})));"
)


@dataclass
class NodeConfigModuleLoader:
    """
    Adapter for script-module config files (CommonJS `module.exports = {...}`).
    Node runs the module; Python only ever sees the JSON it prints.
    """
    node_bin: str = "node"
    timeout_seconds: int = 30
    run_command: Optional[Callable[..., subprocess.CompletedProcess]] = None

    def load(self, path: Path) -> Dict[str, Any]:
        run = self.run_command or subprocess.run
        cmd = [self.node_bin, "-e", _NODE_EXPORT_SCRIPT, str(path)]

        try:
            proc = run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(path.parent),
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise ConfigParseError(f"Cannot load {path.name}: '{self.node_bin}' is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise ConfigParseError(f"Timed out evaluating config module: {path}") from e

        if proc.returncode != 0:
            detail = (proc.stderr or "").strip().splitlines()
            reason = detail[-1] if detail else f"exit code {proc.returncode}"
            raise ConfigParseError(f"Failed to evaluate config module {path}: {reason}")

        try:
            data = json.loads(proc.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Config module {path} did not export JSON-compatible data: {e}") from e

        if not isinstance(data, dict):
            raise ConfigParseError(f"Config module {path} must export an object")
        return data
