from __future__ import annotations

import contextlib
import json
import logging
import shutil
import socket
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.error import URLError
from urllib.request import Request, urlopen

from .config import ChromeConfig, expand_path
from .errors import CdpError, LaunchError

logger = logging.getLogger("mcp.chrome.launcher")

# Flags every managed launch carries, in addition to --window-size.
ISOLATION_FLAGS: list[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
]


@dataclass
class LaunchResult:
    command: list[str]
    started: bool
    message: str
    port: int = 0
    profile_path: str | None = None


class BrowserLauncher:
    """Owns one Chrome process started with --remote-debugging-port."""

    def __init__(self, config: ChromeConfig | None = None) -> None:
        self.config = config or ChromeConfig.from_env()
        self.process: subprocess.Popen | None = None
        self.port: int = 0
        self.profile_path: str | None = None
        self._owns_profile = False

    def endpoint(self, path: str) -> str:
        return f"http://127.0.0.1:{self.port}{path}"

    def cdp_ready(self, timeout: float = 0.4) -> bool:
        """Return True if the CDP HTTP endpoint responds."""
        return self._cdp_ready(timeout=timeout)

    def is_alive(self) -> bool:
        proc = self.process
        return proc is not None and proc.poll() is None

    def _build_common_flags(self, headless: bool, width: int, height: int) -> list[str]:
        flags = [
            f"--remote-debugging-port={self.port}",
            f"--user-data-dir={self.profile_path}",
            "--remote-allow-origins=*",
            "--no-first-run",
            "--no-default-browser-check",
            *ISOLATION_FLAGS,
            f"--window-size={width},{height}",
        ]
        if headless:
            flags.append("--headless=new")
        return flags

    def build_launch_command(self, headless: bool, width: int, height: int) -> list[str]:
        binary = self.config.resolve_binary()
        flags = self._build_common_flags(headless, width, height) + self.config.extra_flags
        # Keeps the initial window to a single blank page.
        return [binary, *flags, "about:blank"]

    def _port_available(self, timeout: float = 0.2) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            try:
                result = sock.connect_ex(("127.0.0.1", self.port))
                return result != 0
            except OSError:
                return False

    def _cdp_ready(self, timeout: float = 0.4) -> bool:
        if not self.port:
            return False
        try:
            with urlopen(self.endpoint("/json/version"), timeout=timeout) as resp:
                return resp.status == 200
        except (OSError, TimeoutError, URLError):
            return False

    def _prepare_profile(self) -> None:
        if self.config.profile_path:
            self.profile_path = expand_path(self.config.profile_path)
            Path(self.profile_path).mkdir(parents=True, exist_ok=True)
            self._owns_profile = False
        else:
            self.profile_path = tempfile.mkdtemp(prefix="chrome-control-")
            self._owns_profile = True

    def launch(self, *, headless: bool, width: int, height: int) -> LaunchResult:
        """Start Chrome and wait for its CDP endpoint; raise LaunchError on failure."""
        self.port = int(self.config.cdp_port) or self.find_free_port()
        if not self._port_available():
            raise LaunchError(
                f"Port {self.port} already in use",
                suggestion="Unset MCP_BROWSER_PORT to pick a free port automatically",
            )
        self._prepare_profile()
        try:
            cmd = self.build_launch_command(headless, width, height)
        except LaunchError:
            self._cleanup_profile()
            raise
        logger.info("launching chrome port=%s headless=%s size=%sx%s", self.port, headless, width, height)
        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except OSError as exc:
            self._cleanup_profile()
            raise LaunchError(f"Failed to start Chrome: {exc}", details={"command": cmd}) from exc

        deadline = time.time() + self.config.launch_timeout
        while time.time() < deadline:
            if self._cdp_ready():
                return LaunchResult(cmd, True, "Chrome launched", port=self.port, profile_path=self.profile_path)
            if not self.is_alive():
                break
            time.sleep(0.1)

        code = self.process.poll() if self.process else None
        self.stop()
        reason = "Chrome exited during startup" if code is not None else "Chrome launch timed out"
        raise LaunchError(reason, details={"command": cmd, "exit_code": code})

    def stop(self, *, timeout: float = 2.0) -> bool:
        """Best-effort stop of the launcher-owned Chrome process."""
        proc = self.process
        self.process = None
        if proc is None:
            self._cleanup_profile()
            return False

        if proc.poll() is None:
            with contextlib.suppress(OSError):
                proc.terminate()
            try:
                proc.wait(timeout=max(0.1, float(timeout)))
            except subprocess.TimeoutExpired:
                # Escalate to kill.
                with contextlib.suppress(OSError):
                    proc.kill()
                with contextlib.suppress(subprocess.TimeoutExpired):
                    proc.wait(timeout=1.0)

        self._cleanup_profile()
        return True

    def _cleanup_profile(self) -> None:
        if self._owns_profile and self.profile_path:
            shutil.rmtree(self.profile_path, ignore_errors=True)
        self._owns_profile = False

    @staticmethod
    def find_free_port() -> int:
        with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
            s.bind(("127.0.0.1", 0))
            return s.getsockname()[1]

    def _get_json(self, path: str, timeout: float) -> object:
        req = Request(self.endpoint(path), headers={"User-Agent": "mcp-chrome-control"})
        with urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read().decode())

    def cdp_version(self, timeout: float = 0.8) -> dict:
        try:
            payload = self._get_json("/json/version", timeout)
        except (URLError, OSError, ValueError) as exc:
            raise LaunchError(f"CDP not reachable on port {self.port}: {exc}") from exc
        return payload if isinstance(payload, dict) else {}

    def list_targets(self, timeout: float = 2.0) -> list[dict]:
        try:
            payload = self._get_json("/json/list", timeout)
        except (URLError, OSError, ValueError) as exc:
            raise CdpError(f"Target list not reachable on port {self.port}: {exc}") from exc
        return payload if isinstance(payload, list) else []
