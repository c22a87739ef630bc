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

"""ShareBrowser Server CLI.

Command-line interface for starting the shared session service.

Usage:
    sharebrowser-serve [--host HOST] [--port PORT] [--width W --height H]

    Or with Python:
    python -m sharebrowser.cli.serve

Options are passed to the service through ``SHAREBROWSER_*`` environment
variables, so everything set here can also be set in the environment.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional


def get_banner() -> str:
    """Get the ShareBrowser banner from banner.txt or fallback.

    Returns:
        The banner string
    """
    banner_path = Path(__file__).parent.parent / "banner.txt"
    if banner_path.exists():
        try:
            return banner_path.read_text()
        except OSError:
            pass

    return r"""     _                     _
 ___| |__   __ _ _ __ ___ | |__  _ __ _____      _____  ___ _ __
/ __| '_ \ / _` | '__/ _ \| '_ \| '__/ _ \ \ /\ / / __|/ _ \ '__|
\__ \ | | | (_| | | |  __/| |_) | | | (_) \ V  V /\__ \  __/ |
|___/_| |_|\__,_|_|  \___||_.__/|_|  \___/ \_/\_/ |___/\___|_|"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Start the ShareBrowser service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sharebrowser-serve                          # Start on 0.0.0.0:3000
  sharebrowser-serve --port 8080              # Custom port
  sharebrowser-serve --width 1920 --height 1080
  sharebrowser-serve --no-headless            # Show the browser window
  sharebrowser-serve --static-dir ./public    # Serve the browser UI at /
        """,
    )

    parser.add_argument(
        "--host",
        default=os.environ.get("SHAREBROWSER_HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("SHAREBROWSER_PORT", "3000")),
        help="Port to bind to (default: 3000)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SHAREBROWSER_LOG_LEVEL", "info"),
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )

    # Session options
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Capture width in pixels (default: 1280)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Capture height in pixels (default: 720)",
    )
    parser.add_argument(
        "--start-url",
        default=None,
        help="Page opened when the session starts (default: https://www.google.com)",
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser headless (default: true)",
    )
    parser.add_argument(
        "--recheck-control",
        action="store_true",
        default=None,
        help="Drop queued commands whose sender lost control before they ran",
    )
    parser.add_argument(
        "--static-dir",
        default=os.environ.get("SHAREBROWSER_STATIC_DIR"),
        help="Directory with the browser-side UI, served at /",
    )
    return parser


def export_environment(args: argparse.Namespace) -> Dict[str, str]:
    """Pass CLI options to the service process through the environment.

    Only options given on the command line are exported; anything else keeps
    its current environment value or the service default.

    Returns:
        The variables that were set
    """
    exported: Dict[str, str] = {
        "SHAREBROWSER_HOST": args.host,
        "SHAREBROWSER_PORT": str(args.port),
        "SHAREBROWSER_LOG_LEVEL": args.log_level,
    }
    if args.width is not None:
        exported["SHAREBROWSER_WIDTH"] = str(args.width)
    if args.height is not None:
        exported["SHAREBROWSER_HEIGHT"] = str(args.height)
    if args.start_url is not None:
        exported["SHAREBROWSER_START_URL"] = args.start_url
    if args.headless is not None:
        exported["SHAREBROWSER_HEADLESS"] = "true" if args.headless else "false"
    if args.recheck_control:
        exported["SHAREBROWSER_RECHECK_CONTROL_ON_EXECUTE"] = "true"
    if args.static_dir:
        exported["SHAREBROWSER_STATIC_DIR"] = args.static_dir

    os.environ.update(exported)
    return exported


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the serve command."""
    args = build_parser().parse_args(argv)

    # Import uvicorn here to avoid import errors if not installed
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is not installed. Install it with:")
        print("  pip install uvicorn[standard]")
        sys.exit(1)

    export_environment(args)

    print()
    print(get_banner())
    print()
    print("  One live browser, shared")
    print()
    print("  Starting server...")
    print()
    print(f"  Host:      {args.host}")
    print(f"  Port:      {args.port}")
    print(f"  Log Level: {args.log_level}")
    if args.static_dir:
        print(f"  UI:        http://{args.host}:{args.port}/")
    print(f"  Socket:    ws://{args.host}:{args.port}/ws")
    print(f"  Health:    http://{args.host}:{args.port}/health")
    print()

    # The session lives in-process, so always one worker
    uvicorn.run(
        "sharebrowser.service.app:app",
        host=args.host,
        port=args.port,
        workers=1,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
