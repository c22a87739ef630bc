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
URL helpers for the address bar.

Participants type free text into a shared address bar. This module turns
that text into something the browser can load and rejects targets that
must never reach the engine.

Usage:
    >>> from sharebrowser.utils.urls import normalize_url
    >>> normalize_url("example.com")
    'https://example.com'
    >>> normalize_url("openai")
    'https://www.google.com/search?q=openai'
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import quote, urlsplit

from sharebrowser.exceptions import InvalidURLError

BLANK_URL = "about:blank"
DEFAULT_HOME_URL = "https://www.google.com"
DEFAULT_SEARCH_URL = "https://www.google.com/search?q="

_ABSOLUTE_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^[\w.-]+\.[a-z]{2,}$", re.IGNORECASE)


def normalize_url(
    text: str,
    home_url: str = DEFAULT_HOME_URL,
    search_url: str = DEFAULT_SEARCH_URL,
) -> str:
    """
    Normalize address bar input into a loadable URL.

    Args:
        text: Raw input from a participant
        home_url: Target for empty input
        search_url: Query URL prefix used for anything that is not a URL

    Returns:
        - the input unchanged when it is an absolute http(s) URL
        - ``https://<input>`` when it looks like a bare hostname (``word.tld``)
        - ``search_url`` + the percent-encoded input otherwise

    Example:
        >>> normalize_url("  https://example.com/a  ")
        'https://example.com/a'
        >>> normalize_url("news.ycombinator.com")
        'https://news.ycombinator.com'
        >>> normalize_url("open ai")
        'https://www.google.com/search?q=open%20ai'
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return home_url
    if _ABSOLUTE_RE.match(trimmed):
        return trimmed
    if _HOSTNAME_RE.match(trimmed):
        return f"https://{trimmed}"
    return f"{search_url}{quote(trimmed, safe='')}"


def validate_url(url: str) -> str:
    """
    Check that a normalized URL is something the browser may load.

    Args:
        url: Normalized URL

    Returns:
        The URL unchanged

    Raises:
        InvalidURLError: If the scheme is not http(s) or the host is missing
    """
    try:
        parts = urlsplit(url)
        # Accessing port validates it ("http://host:99999" raises here)
        parts.port
    except ValueError as e:
        raise InvalidURLError(f"Malformed URL: {url} ({e})", url=url) from e

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise InvalidURLError(f"Malformed URL: {url}", url=url)
    return url


def is_self_target(url: str, self_hosts: Iterable[str]) -> bool:
    """
    Check whether a URL points back at the hosting service.

    Loading the service inside its own shared page would stream the viewer
    into itself, so such targets are rejected.

    Args:
        url: Normalized URL
        self_hosts: ``host:port`` strings the service answers on

    Returns:
        True if the URL's ``host:port`` is one of ``self_hosts``
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False
    if not parts.hostname:
        return False
    if port is None:
        port = 443 if parts.scheme.lower() == "https" else 80
    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{port}"
    return netloc in {h.lower() for h in self_hosts}


def is_blank(url: str) -> bool:
    """Whether a URL is the empty placeholder document."""
    return not url or url == BLANK_URL
