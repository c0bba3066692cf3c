# overleaf_launcher/desktop.py
"""
Overleaf Launcher – native desktop window
=========================================

Shows a small start page in a pywebview window. Clicking "Start Overleaf"
runs one launch on pywebview's js_api thread; progress and the outcome are
pushed into the page, which redirects to the launchpad once Overleaf is up.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import json
import logging
from pathlib import Path
import threading
from typing import Any

from overleaf_launcher.startup.config_schema import LauncherConfig
from overleaf_launcher.startup.notifications import (
    LaunchOutcome,
    LaunchState,
    NotificationSink,
)
from overleaf_launcher.startup.orchestrator import LaunchCoordinator

try:
    import webview  # type: ignore
except ModuleNotFoundError:
    webview = None  # run_desktop() will raise

logger = logging.getLogger(__name__)

# ────────────────────────────── static page
STATIC_DIR = Path(__file__).resolve().parent / "static"
INDEX_PAGE = STATIC_DIR / "index.html"

WINDOW_TITLE = "Overleaf Launcher"
REDIRECT_DELAY_MS = 1000

CoordinatorFactory = Callable[..., LaunchCoordinator]


# ────────────────────────────── page notifications
class WebviewNotificationSink:
    """Forwards launch events to ``window.launcher`` in the page."""

    def __init__(
        self,
        window: Any,
        launchpad_url: str,
        redirect_delay_ms: int = REDIRECT_DELAY_MS,
    ) -> None:
        self._window = window
        self._launchpad_url = launchpad_url
        self._redirect_delay_ms = redirect_delay_ms

    def _call(self, handler: str, *args: Any) -> None:
        js_args = ", ".join(json.dumps(arg) for arg in args)
        self._window.evaluate_js(f"window.launcher.{handler}({js_args})")

    def status_update(self, message: str) -> None:
        self._call("onStatusUpdate", message)

    def state_changed(self, state: LaunchState) -> None:
        self._call("onStateChanged", state.value)

    def started(self) -> None:
        self._call("onStarted", self._launchpad_url, self._redirect_delay_ms)

    def already_running(self) -> None:
        self._call("onAlreadyRunning", self._launchpad_url, self._redirect_delay_ms)

    def error(self, reason: str) -> None:
        self._call("onError", reason)


# ────────────────────────────── js_api bridge
class LauncherBridge:
    """Object exposed to the page as ``window.pywebview.api``.

    Attributes are private so pywebview only exposes the methods.
    """

    def __init__(
        self,
        config: LauncherConfig,
        coordinator_factory: CoordinatorFactory = LaunchCoordinator,
    ) -> None:
        self._config = config
        self._coordinator_factory = coordinator_factory
        self._window: Any = None
        self._busy = threading.Lock()

    def _attach(self, window: Any) -> None:
        self._window = window

    def start(self) -> str:
        """Called from JS: run one launch and return the outcome kind."""
        if self._window is None:
            msg = "Bridge is not attached to a window"
            raise RuntimeError(msg)

        if not self._busy.acquire(blocking=False):
            logger.info("Launch already in progress, ignoring start request")
            return "busy"

        try:
            sink: NotificationSink = WebviewNotificationSink(
                self._window, self._config.launchpad_url
            )
            coordinator = self._coordinator_factory(self._config, sink=sink)
            outcome = asyncio.run(self._launch(coordinator))
            return outcome.kind.value
        finally:
            self._busy.release()

    @staticmethod
    async def _launch(coordinator: LaunchCoordinator) -> LaunchOutcome:
        outcome = await coordinator.launch()
        await coordinator.aclose()
        return outcome


# ────────────────────────────── entry
def run_desktop(config: LauncherConfig) -> None:
    if webview is None:
        msg = (
            "pywebview not installed – run:  "
            "pip install 'overleaf-desktop-launcher[desktop]'"
        )
        raise RuntimeError(msg)

    bridge = LauncherBridge(config)

    window = webview.create_window(
        title=WINDOW_TITLE,
        url=str(INDEX_PAGE),
        width=1200,
        height=800,
        js_api=bridge,
    )
    bridge._attach(window)

    logger.info("Opening launcher window")
    webview.start(debug=config.debug)
