from .audit_service import AuditService
from .lighthouse_service import LighthouseService
from .playwright_service import PlaywrightTestService

__all__ = [
    "AuditService",
    "LighthouseService",
    "PlaywrightTestService",
]
