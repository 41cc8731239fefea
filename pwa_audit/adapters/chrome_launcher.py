from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, List, Optional

log = logging.getLogger(__name__)

DEFAULT_CHROME_FLAGS = ["--no-sandbox", "--disable-gpu"]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class LaunchedBrowser:
    """A running headless Chromium exposing a remote-debugging port."""

    def __init__(self, port: int, browser: Any, playwright: Any):
        self.port = port
        self._browser = browser
        self._playwright = playwright

    def kill(self) -> None:
        try:
            self._browser.close()
        finally:
            self._playwright.stop()


@dataclass
class PlaywrightChromeLauncher:
    """
    Launches Chromium through Playwright with a remote-debugging port so that
    an out-of-process engine (Lighthouse) can drive it.
    """
    chrome_flags: List[str] = field(default_factory=lambda: list(DEFAULT_CHROME_FLAGS))
    port: Optional[int] = None

    def launch(self) -> LaunchedBrowser:
        # Imported here so a missing Playwright install surfaces as a launch failure.
        from playwright.sync_api import sync_playwright

        port = self.port or _free_port()
        pw = sync_playwright().start()
        try:
            browser = pw.chromium.launch(
                headless=True,
                args=[f"--remote-debugging-port={port}", *self.chrome_flags],
            )
        except Exception:
            pw.stop()
            raise

        log.info("Chrome launched on port %s", port)
        return LaunchedBrowser(port=port, browser=browser, playwright=pw)
