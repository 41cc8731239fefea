from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from pwa_audit.adapters.chrome_launcher import PlaywrightChromeLauncher
from pwa_audit.adapters.lighthouse_cli import LighthouseCli
from pwa_audit.domain.models import AuditConfig, LighthouseResult, ScoringFailure, ScoringOutcome

log = logging.getLogger(__name__)


def categories_for(config: AuditConfig) -> List[str]:
    categories = list(config.thresholds.keys())
    if "pwa" not in categories:
        categories.append("pwa")
    return categories


@dataclass
class LighthouseService:
    """
    Scores one URL with Lighthouse against a freshly launched headless Chrome.
    Never raises: a missing or broken toolchain becomes an empty result with `error` set.
    """
    launcher: PlaywrightChromeLauncher = field(default_factory=PlaywrightChromeLauncher)
    engine: LighthouseCli = field(default_factory=LighthouseCli)

    def run(self, url: str, config: AuditConfig) -> LighthouseResult:
        categories = categories_for(config)

        try:
            log.info("Launching Chrome for: %s", url)
            chrome = self.launcher.launch()
            try:
                outcome = self.engine.run(url, chrome.port, categories)
            finally:
                chrome.kill()
        except Exception as e:
            message = str(e) or e.__class__.__name__
            log.warning("Could not run Lighthouse for %s", url)
            log.warning("Reason: %s", message)
            log.warning("Skipping Lighthouse audit, returning empty scores.")
            return LighthouseResult(url=url, scores={}, error=message)

        return self._to_result(url, outcome, config)

    def _to_result(self, url: str, outcome: ScoringOutcome, config: AuditConfig) -> LighthouseResult:
        if isinstance(outcome, ScoringFailure):
            log.warning("Lighthouse gave no scores for %s: %s", url, outcome.reason)
            return LighthouseResult(url=url, scores={}, error=outcome.reason)

        log.info("Scores for %s: %s", url, outcome.scores)
        self._warn_below_thresholds(url, outcome.scores, config)
        return LighthouseResult(url=url, scores=dict(outcome.scores))

    @staticmethod
    def _warn_below_thresholds(url: str, scores: dict, config: AuditConfig) -> None:
        # Advisory only; does not change the result.
        for category, minimum in config.thresholds.items():
            score = scores.get(category)
            if score is not None and score < minimum:
                log.warning("%s: %s score %.2f is below threshold %.2f", url, category, score, minimum)
