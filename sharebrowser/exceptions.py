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

"""Custom exceptions for ShareBrowser.

This module defines the exception hierarchy used throughout ShareBrowser.
All exceptions inherit from ShareBrowserError for easy catching and handling.

Exception Hierarchy:
    ShareBrowserError (base)
    ├── BrowserError - Browser instance errors
    ├── PageError - Shared page errors (closed page, failed capture)
    ├── NavigationError - Navigation failures
    │   └── InvalidURLError - Navigation targets rejected before dispatch
    ├── InputError - Pointer/keyboard injection failures
    └── ConfigurationError - Configuration errors

None of these are fatal to the service. The command serializer and the
frame streamer catch them per command / per cycle and keep running.

Example:
    try:
        url = validate_url(normalize_url(text))
    except InvalidURLError:
        # Drop the navigation, nothing reaches the browser
        pass
"""


class ShareBrowserError(Exception):
    """Base exception for all ShareBrowser errors.

    All custom exceptions in ShareBrowser inherit from this class,
    allowing callers to catch all ShareBrowser-specific errors with
    a single except clause.
    """
    pass


class BrowserError(ShareBrowserError):
    """Exception raised for browser-related errors.

    Raised when browser launch, context creation or shutdown fails.

    Examples:
        - Browser failed to launch
        - Unsupported browser type
        - Browser accessed before start()
    """
    pass


class PageError(ShareBrowserError):
    """Exception raised for shared page errors.

    Raised when the shared page handle is missing or closed, or when a
    page-level operation such as a screenshot or script evaluation fails.

    Examples:
        - Page closed underneath the session
        - Screenshot timed out
        - Selection query failed
    """
    pass


class NavigationError(ShareBrowserError):
    """Exception raised when navigation fails.

    Raised when goto, reload or history traversal fails against the engine.

    Examples:
        - Navigation timeout
        - Network error during navigation
    """
    pass


class InvalidURLError(NavigationError):
    """Exception raised when a navigation target is rejected.

    Raised before anything is sent to the browser, either because the
    normalized target is malformed or because it points back at the
    hosting service itself.
    """

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class InputError(ShareBrowserError):
    """Exception raised when input injection fails.

    Examples:
        - Mouse or keyboard call rejected by the page
        - Unknown control-event type
    """
    pass


class ConfigurationError(ShareBrowserError):
    """Exception raised for configuration errors.

    Examples:
        - Non-numeric port or dimensions in the environment
        - Capture resolution of zero
    """
    pass
