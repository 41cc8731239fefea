from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

import pytest

from pwa_audit.adapters.lighthouse_cli import NO_RESULTS, LighthouseCli, scores_from_report
from pwa_audit.domain.models import AuditConfig, ScoringFailure, ScoringOutcome, ScoringSuccess, ServiceEndpoints
from pwa_audit.services.lighthouse_service import LighthouseService, categories_for


# -----------------------------
# Test doubles
# -----------------------------
class FakeBrowser:
    def __init__(self, port: int = 9222):
        self.port = port
        self.killed = False

    def kill(self) -> None:
        self.killed = True


class FakeLauncher:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.browsers: List[FakeBrowser] = []

    def launch(self) -> FakeBrowser:
        if self.error:
            raise self.error
        b = FakeBrowser()
        self.browsers.append(b)
        return b


class FakeEngine:
    def __init__(self, outcome: Optional[ScoringOutcome] = None, error: Optional[Exception] = None):
        self.outcome = outcome
        self.error = error
        self.calls = []

    def run(self, url: str, port: int, categories: List[str]) -> ScoringOutcome:
        self.calls.append((url, port, list(categories)))
        if self.error:
            raise self.error
        return self.outcome


@dataclass
class FakeCompletedProcess:
    returncode: int
    stdout: str = ""
    stderr: str = ""


def make_config(thresholds=None) -> AuditConfig:
    return AuditConfig(
        urls=["https://a.test"],
        thresholds={"pwa": 0.9} if thresholds is None else thresholds,
        custom_tests=[],
        services=ServiceEndpoints(),
        output_dir="./out",
    )


# -----------------------------
# Category selection
# -----------------------------
def test_pwa_is_always_requested():
    assert categories_for(make_config({"performance": 0.8})) == ["performance", "pwa"]
    assert categories_for(make_config({"pwa": 0.9, "seo": 0.5})) == ["pwa", "seo"]
    assert categories_for(make_config({})) == ["pwa"]


# -----------------------------
# Service behaviour
# -----------------------------
def test_success_returns_scores_and_closes_browser():
    launcher = FakeLauncher()
    engine = FakeEngine(ScoringSuccess({"pwa": 0.95, "performance": 0.7}))
    svc = LighthouseService(launcher=launcher, engine=engine)

    result = svc.run("https://a.test", make_config({"performance": 0.5}))

    assert result.url == "https://a.test"
    assert result.scores == {"pwa": 0.95, "performance": 0.7}
    assert result.error is None
    assert engine.calls == [("https://a.test", 9222, ["performance", "pwa"])]
    assert launcher.browsers[0].killed is True


def test_engine_failure_outcome_sets_error_and_closes_browser():
    launcher = FakeLauncher()
    svc = LighthouseService(launcher=launcher, engine=FakeEngine(ScoringFailure(NO_RESULTS)))

    result = svc.run("https://a.test", make_config())

    assert result.scores == {}
    assert result.error == NO_RESULTS
    assert launcher.browsers[0].killed is True


def test_launch_failure_degrades_without_raising(caplog):
    svc = LighthouseService(
        launcher=FakeLauncher(error=RuntimeError("Executable doesn't exist")),
        engine=FakeEngine(ScoringSuccess({"pwa": 1.0})),
    )

    with caplog.at_level(logging.WARNING, logger="pwa_audit"):
        result = svc.run("https://a.test", make_config())

    assert result.scores == {}
    assert result.error == "Executable doesn't exist"
    assert "Could not run Lighthouse" in caplog.text


def test_engine_exception_degrades_and_still_closes_browser():
    launcher = FakeLauncher()
    svc = LighthouseService(launcher=launcher, engine=FakeEngine(error=FileNotFoundError("lighthouse")))

    result = svc.run("https://a.test", make_config())

    assert result.scores == {}
    assert result.error == "lighthouse"
    assert launcher.browsers[0].killed is True


def test_scores_below_threshold_only_warn(caplog):
    svc = LighthouseService(launcher=FakeLauncher(), engine=FakeEngine(ScoringSuccess({"pwa": 0.4})))

    with caplog.at_level(logging.WARNING, logger="pwa_audit"):
        result = svc.run("https://a.test", make_config({"pwa": 0.9}))

    assert result.error is None
    assert result.scores == {"pwa": 0.4}
    assert "below threshold" in caplog.text


# -----------------------------
# Report parsing + CLI adapter
# -----------------------------
def test_null_score_becomes_zero_and_missing_category_is_absent():
    report = {"categories": {"performance": {"score": None}, "pwa": {"score": 0.5}}}

    outcome = scores_from_report(report)

    assert outcome == ScoringSuccess({"performance": 0, "pwa": 0.5})
    assert "accessibility" not in outcome.scores


@pytest.mark.parametrize("report", [None, {}, {"categories": None}, []])
def test_report_without_categories_is_no_results(report):
    assert scores_from_report(report) == ScoringFailure(NO_RESULTS)


def test_cli_builds_command_and_parses_stdout():
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["timeout"] = kwargs.get("timeout")
        return FakeCompletedProcess(0, stdout=json.dumps({"categories": {"pwa": {"score": 1}}}))

    cli = LighthouseCli(timeout_seconds=42, run_command=fake_run)
    outcome = cli.run("https://a.test", 9333, ["performance", "pwa"])

    assert outcome == ScoringSuccess({"pwa": 1})
    assert seen["cmd"][:2] == ["lighthouse", "https://a.test"]
    assert "--port=9333" in seen["cmd"]
    assert "--only-categories=performance,pwa" in seen["cmd"]
    assert "--output-path=stdout" in seen["cmd"]
    assert seen["timeout"] == 42


def test_cli_empty_stdout_is_no_results():
    cli = LighthouseCli(run_command=lambda cmd, **kw: FakeCompletedProcess(0, stdout="  "))
    assert cli.run("https://a.test", 1, ["pwa"]) == ScoringFailure(NO_RESULTS)


def test_cli_non_zero_exit_is_failure_with_stderr():
    cli = LighthouseCli(run_command=lambda cmd, **kw: FakeCompletedProcess(1, stderr="boom\nRuntime error encountered"))
    outcome = cli.run("https://a.test", 1, ["pwa"])
    assert isinstance(outcome, ScoringFailure)
    assert "Runtime error encountered" in outcome.reason


def test_cli_timeout_propagates_to_service_and_degrades():
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    launcher = FakeLauncher()
    svc = LighthouseService(launcher=launcher, engine=LighthouseCli(timeout_seconds=1, run_command=fake_run))

    result = svc.run("https://a.test", make_config())

    assert result.scores == {}
    assert "timed out" in result.error
    assert launcher.browsers[0].killed is True
