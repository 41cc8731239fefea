from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List

from pwa_audit.domain.models import AuditConfig, AuditResult, AuditRunOutput, RunSummary
from pwa_audit.repositories.result_repository import ResultRepository
from pwa_audit.services.lighthouse_service import LighthouseService
from pwa_audit.services.playwright_service import PlaywrightTestService

log = logging.getLogger(__name__)

BANNER = "=" * 60


def iso_timestamp(now: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2026-10-17T14:39:00.123Z."""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AuditService:
    """
    Service layer: one full audit run.
    Custom tests run once per run; Lighthouse runs once per URL, in configured order.
    """
    lighthouse: LighthouseService
    playwright: PlaywrightTestService
    result_repo: ResultRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def run(self, config: AuditConfig) -> AuditRunOutput:
        timestamp = iso_timestamp(self.clock())
        results: List[AuditResult] = []

        log.info(BANNER)
        log.info("PWA Audit - starting audit run")
        log.info("Timestamp: %s", timestamp)
        log.info("URLs: %d", len(config.urls))
        log.info("Custom tests: %d", len(config.custom_tests))
        log.info(BANNER)

        test_results = self.playwright.run(config)

        for url in config.urls:
            log.info("--- Auditing: %s ---", url)
            results.append(
                AuditResult(
                    url=url,
                    lighthouse=self.lighthouse.run(url, config),
                    playwright_tests=test_results,
                )
            )

        output = AuditRunOutput(
            timestamp=timestamp,
            results=results,
            summary=RunSummary.from_results(results, test_results),
        )

        self.result_repo.save(config.output_dir, output)

        s = output.summary
        log.info(BANNER)
        log.info("Audit complete")
        log.info("  URLs audited:       %d", s.total_urls)
        log.info("  Lighthouse errors:  %d", s.lighthouse_errors)
        log.info("  Tests run:          %d", s.tests_run)
        log.info("  Tests passed:       %d", s.tests_passed)
        log.info("  Tests failed:       %d", s.tests_failed)
        log.info(BANNER)

        return output
