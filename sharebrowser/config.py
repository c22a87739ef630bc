# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Session configuration for ShareBrowser.

All tunables of a shared session live in one dataclass. The service builds
it from ``SHAREBROWSER_*`` environment variables, which is also how the
``sharebrowser-serve`` CLI hands its options to the uvicorn worker.

Example:
    >>> config = SessionConfig(width=1920, height=1080)
    >>> config.viewport
    {'width': 1920, 'height': 1080}

    >>> import os
    >>> os.environ["SHAREBROWSER_PORT"] = "8080"
    >>> SessionConfig.from_env().port
    8080
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sharebrowser.exceptions import ConfigurationError
from sharebrowser.utils.urls import DEFAULT_HOME_URL, DEFAULT_SEARCH_URL

ENV_PREFIX = "SHAREBROWSER_"

DEFAULT_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--disable-infobars",
    "--lang=en-US",
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/128.0.0.0 Safari/537.36"
)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SessionConfig:
    """Configuration for a shared browsing session.

    The capture resolution (``width`` x ``height``) is fixed for the whole
    session. Pointer coordinates reported by participants are rescaled to it.
    """

    # Service address, also used by the self-navigation guard
    host: str = "0.0.0.0"
    port: int = 3000

    # Browser
    headless: bool = True
    browser_type: str = "chromium"
    launch_args: List[str] = field(default_factory=lambda: list(DEFAULT_LAUNCH_ARGS))
    user_agent: str = DEFAULT_USER_AGENT

    # Fixed capture resolution
    width: int = 1280
    height: int = 720

    # Navigation
    start_url: Optional[str] = DEFAULT_HOME_URL
    home_url: str = DEFAULT_HOME_URL
    search_url: str = DEFAULT_SEARCH_URL
    wait_until: str = "domcontentloaded"
    navigation_timeout_ms: int = 30000

    # Frame streaming
    frame_interval: float = 0.1
    jpeg_quality: int = 60
    screenshot_timeout_ms: int = 2000
    restart_delay: float = 1.0
    recover_delay: float = 1.0

    # Input
    type_delay_ms: int = 50

    # Re-check the control holder when a queued command starts executing,
    # not only when it is submitted
    recheck_control_on_execute: bool = False

    # Optional directory with the browser-side UI, mounted at /
    static_dir: Optional[str] = None

    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"Capture resolution must be positive, got {self.width}x{self.height}"
            )
        if not 0 <= self.jpeg_quality <= 100:
            raise ConfigurationError(f"jpeg_quality must be 0-100, got {self.jpeg_quality}")
        if self.frame_interval <= 0:
            raise ConfigurationError(f"frame_interval must be positive, got {self.frame_interval}")

    @property
    def viewport(self) -> Dict[str, int]:
        """Viewport dict in the shape Playwright expects."""
        return {"width": self.width, "height": self.height}

    @property
    def self_hosts(self) -> List[str]:
        """``host:port`` strings that resolve to this service.

        IPv6 hosts are bracketed (``[::1]:3000``), matching how
        ``is_self_target`` formats them.
        """
        hosts = {
            f"localhost:{self.port}",
            f"127.0.0.1:{self.port}",
            f"0.0.0.0:{self.port}",
            f"[::1]:{self.port}",
        }
        host = self.host.strip("[]")
        if host not in ("0.0.0.0", "::", ""):
            if ":" in host:
                host = f"[{host}]"
            hosts.add(f"{host}:{self.port}")
        return sorted(hosts)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionConfig":
        """Build a configuration from ``SHAREBROWSER_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        environ = os.environ if environ is None else environ
        converters = {
            "host": str,
            "port": int,
            "headless": _env_bool,
            "browser_type": str,
            "user_agent": str,
            "width": int,
            "height": int,
            "start_url": str,
            "home_url": str,
            "search_url": str,
            "wait_until": str,
            "navigation_timeout_ms": int,
            "frame_interval": float,
            "jpeg_quality": int,
            "screenshot_timeout_ms": int,
            "restart_delay": float,
            "recover_delay": float,
            "type_delay_ms": int,
            "recheck_control_on_execute": _env_bool,
            "static_dir": str,
            "log_level": str,
        }

        values: Dict[str, Any] = {}
        for name, convert in converters.items():
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                values[name] = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}"
                ) from e

        launch_args = environ.get(f"{ENV_PREFIX}LAUNCH_ARGS")
        if launch_args:
            values["launch_args"] = [a for a in launch_args.split(",") if a]

        return cls(**values)
