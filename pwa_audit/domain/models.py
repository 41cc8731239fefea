from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class CustomTest:
    path: str
    type: str


@dataclass(frozen=True)
class ServiceEndpoints:
    generator: Optional[str] = None
    recorder: Optional[str] = None
    reporter: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in (
            ("generator", self.generator),
            ("recorder", self.recorder),
            ("reporter", self.reporter),
        ) if v}


@dataclass(frozen=True)
class AuditConfig:
    urls: List[str]
    thresholds: Dict[str, float]
    custom_tests: List[CustomTest]
    services: ServiceEndpoints
    output_dir: str
    log_level: Optional[str] = None


# Scoring engine boundary: one of these two comes back from the engine adapter.
@dataclass(frozen=True)
class ScoringSuccess:
    scores: Dict[str, float]


@dataclass(frozen=True)
class ScoringFailure:
    reason: str


ScoringOutcome = Union[ScoringSuccess, ScoringFailure]


@dataclass(frozen=True)
class LighthouseResult:
    url: str
    scores: Dict[str, float] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"url": self.url, "scores": dict(self.scores)}
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class PlaywrightTestResult:
    file: str
    type: str
    passed: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"file": self.file, "type": self.type, "passed": self.passed}
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class AuditResult:
    url: str
    lighthouse: LighthouseResult
    playwright_tests: List[PlaywrightTestResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "lighthouse": self.lighthouse.to_dict(),
            "playwrightTests": [t.to_dict() for t in self.playwright_tests],
        }


@dataclass(frozen=True)
class RunSummary:
    total_urls: int
    lighthouse_errors: int
    tests_run: int
    tests_passed: int
    tests_failed: int

    @classmethod
    def from_results(
        cls, results: List[AuditResult], tests: List[PlaywrightTestResult]
    ) -> "RunSummary":
        tests_run = len(tests)
        tests_passed = sum(1 for t in tests if t.passed)
        return cls(
            total_urls=len(results),
            lighthouse_errors=sum(1 for r in results if r.lighthouse.error),
            tests_run=tests_run,
            tests_passed=tests_passed,
            tests_failed=tests_run - tests_passed,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalUrls": self.total_urls,
            "lighthouseErrors": self.lighthouse_errors,
            "testsRun": self.tests_run,
            "testsPassed": self.tests_passed,
            "testsFailed": self.tests_failed,
        }


@dataclass(frozen=True)
class AuditRunOutput:
    timestamp: str
    results: List[AuditResult]
    summary: RunSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }
