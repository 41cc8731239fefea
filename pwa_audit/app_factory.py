from __future__ import annotations

from pwa_audit.adapters.chrome_launcher import PlaywrightChromeLauncher
from pwa_audit.adapters.lighthouse_cli import LighthouseCli
from pwa_audit.repositories.result_repository import ResultRepository
from pwa_audit.services.audit_service import AuditService
from pwa_audit.services.lighthouse_service import LighthouseService
from pwa_audit.services.playwright_service import PlaywrightTestService


def create_audit_service() -> AuditService:
    lighthouse = LighthouseService(
        launcher=PlaywrightChromeLauncher(),
        engine=LighthouseCli(),
    )

    return AuditService(
        lighthouse=lighthouse,
        playwright=PlaywrightTestService(),
        result_repo=ResultRepository(),
    )

#############################
#
# Wiring, outermost first:
#   cli/args.py        argparse only
#   cli/controller.py  loads config, calls AuditService, maps outcome to exit code
#   config/            file + env -> AuditConfig
#   services/          AuditService -> LighthouseService, PlaywrightTestService
#   adapters/          Playwright-launched Chrome, lighthouse CLI, node config loader
#   repositories/      ResultRepository writes audit-result-<ts>.json
#   domain/            frozen dataclasses + exceptions; no I/O
