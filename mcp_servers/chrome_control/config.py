from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .errors import LaunchError

PATH_BINARY_NAMES: list[str] = [
    "google-chrome-stable",
    "google-chrome",
    "chromium-browser",
    "chromium",
]


def _windows_candidates() -> list[str]:
    roots = [
        os.environ.get("LOCALAPPDATA"),
        os.environ.get("PROGRAMFILES"),
        os.environ.get("PROGRAMFILES(X86)"),
    ]
    out: list[str] = []
    for root in roots:
        if not root:
            continue
        out.append(str(Path(root) / "Google" / "Chrome" / "Application" / "chrome.exe"))
        out.append(str(Path(root) / "Chromium" / "Application" / "chrome.exe"))
    out.extend(
        [
            "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
            "C:\\Program Files (x86)\\Google\\Chrome\\Application\\chrome.exe",
        ]
    )
    return out


def _darwin_candidates() -> list[str]:
    home = Path.home()
    return [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
        "/Applications/Google Chrome Canary.app/Contents/MacOS/Google Chrome Canary",
        str(home / "Applications" / "Google Chrome.app" / "Contents" / "MacOS" / "Google Chrome"),
        str(home / "Applications" / "Chromium.app" / "Contents" / "MacOS" / "Chromium"),
    ]


def _linux_candidates() -> list[str]:
    return [
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
        "/usr/local/bin/chrome",
        "/usr/local/bin/chromium",
        # Snap builds last: they ignore --user-data-dir outside $HOME.
        "/snap/bin/chromium",
    ]


def default_binary_candidates(platform: str | None = None) -> list[str]:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return _windows_candidates()
    if platform == "darwin":
        return _darwin_candidates()
    return _linux_candidates()


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def find_chrome(platform: str | None = None) -> str:
    """Return a usable Chrome/Chromium executable or raise LaunchError."""
    env_path = os.environ.get("MCP_BROWSER_BINARY")
    if env_path:
        path = expand_path(env_path)
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path
        raise LaunchError(
            f"MCP_BROWSER_BINARY is not an executable file: {path}",
            suggestion="Point MCP_BROWSER_BINARY at a Chrome or Chromium executable",
        )

    searched: list[str] = []
    for name in PATH_BINARY_NAMES:
        found = shutil.which(name)
        if found:
            return found
        searched.append(name)

    for candidate in default_binary_candidates(platform):
        searched.append(candidate)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate

    raise LaunchError(
        "Chrome not found. Please install Google Chrome or Chromium browser. "
        f"Searched paths: {', '.join(searched)}",
        suggestion="Install Chrome/Chromium or set MCP_BROWSER_BINARY",
    )


def _parse_window_size(raw: str, default: tuple[int, int]) -> tuple[int, int]:
    try:
        w, h = (int(part.strip()) for part in raw.split(",", 1))
    except ValueError:
        return default
    if w <= 0 or h <= 0:
        return default
    return w, h


@dataclass
class ChromeConfig:
    binary_path: str | None = None
    profile_path: str | None = None
    cdp_port: int = 0
    headless: bool = False
    width: int = 1280
    height: int = 720
    extra_flags: list[str] = field(default_factory=list)
    launch_timeout: float = 15.0
    cdp_timeout: float = 30.0
    screenshot_max_bytes: int = 950_000
    error_trace: bool = False

    def resolve_binary(self) -> str:
        """Return the configured binary, discovering (and caching) it on first use."""
        if not self.binary_path:
            self.binary_path = find_chrome()
        return self.binary_path

    @classmethod
    def from_env(cls) -> ChromeConfig:
        binary = os.environ.get("MCP_BROWSER_BINARY")
        profile = os.environ.get("MCP_BROWSER_PROFILE")
        port = int(os.environ.get("MCP_BROWSER_PORT", "0"))
        flags_raw = os.environ.get("MCP_BROWSER_FLAGS", "")
        extra_flags = [flag.strip() for flag in flags_raw.split(",") if flag.strip()]
        width, height = _parse_window_size(os.environ.get("MCP_WINDOW_SIZE", "1280,720"), (1280, 720))
        return cls(
            binary_path=expand_path(binary) if binary else None,
            profile_path=expand_path(profile) if profile else None,
            cdp_port=port,
            headless=os.environ.get("MCP_HEADLESS", "0") == "1",
            width=width,
            height=height,
            extra_flags=extra_flags,
            launch_timeout=float(os.environ.get("MCP_LAUNCH_TIMEOUT", "15")),
            cdp_timeout=float(os.environ.get("MCP_CDP_TIMEOUT", "30")),
            screenshot_max_bytes=int(os.environ.get("MCP_SCREENSHOT_MAX_BYTES", "950000")),
            error_trace=os.environ.get("MCP_ERROR_TRACE", "0") == "1",
        )
