# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the sharebrowser-serve CLI."""

import os
from unittest.mock import MagicMock, patch

import pytest


class TestServeCLI:
    """Tests for serve CLI command."""

    def test_get_banner(self):
        """Test get_banner function."""
        from sharebrowser.cli.serve import get_banner

        banner = get_banner()

        assert banner is not None
        assert len(banner) > 0

    def test_main_starts_uvicorn(self):
        """Test main runs the app with a single worker."""
        from sharebrowser.cli.serve import main

        mock_uvicorn = MagicMock()
        with patch.dict(os.environ, {}, clear=False):
            with patch("sys.argv", ["serve", "--host", "127.0.0.1", "--port", "8080"]):
                with patch.dict("sys.modules", {"uvicorn": mock_uvicorn}):
                    main()

                    assert os.environ["SHAREBROWSER_PORT"] == "8080"

        mock_uvicorn.run.assert_called_once()
        args, kwargs = mock_uvicorn.run.call_args
        assert args[0] == "sharebrowser.service.app:app"
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8080
        assert kwargs["workers"] == 1

    def test_session_options_exported(self):
        """Test session options reach the service through the environment."""
        from sharebrowser.cli.serve import build_parser, export_environment

        args = build_parser().parse_args([
            "--width", "1920",
            "--height", "1080",
            "--start-url", "https://example.com",
            "--no-headless",
            "--recheck-control",
        ])
        with patch.dict(os.environ, {}, clear=False):
            exported = export_environment(args)

            assert os.environ["SHAREBROWSER_WIDTH"] == "1920"

        assert exported["SHAREBROWSER_HEIGHT"] == "1080"
        assert exported["SHAREBROWSER_START_URL"] == "https://example.com"
        assert exported["SHAREBROWSER_HEADLESS"] == "false"
        assert exported["SHAREBROWSER_RECHECK_CONTROL_ON_EXECUTE"] == "true"

    def test_unset_options_not_exported(self):
        """Test options left at their defaults do not override the environment."""
        from sharebrowser.cli.serve import build_parser, export_environment

        with patch.dict(os.environ, {"SHAREBROWSER_WIDTH": "800"}, clear=False):
            exported = export_environment(build_parser().parse_args([]))

            assert os.environ["SHAREBROWSER_WIDTH"] == "800"

        assert "SHAREBROWSER_WIDTH" not in exported
        assert "SHAREBROWSER_HEADLESS" not in exported

    def test_environment_defaults(self):
        """Test host, port and log level default from the environment."""
        from sharebrowser.cli.serve import build_parser

        with patch.dict(os.environ, {
            "SHAREBROWSER_HOST": "192.168.1.100",
            "SHAREBROWSER_PORT": "9000",
            "SHAREBROWSER_LOG_LEVEL": "debug",
        }):
            args = build_parser().parse_args([])

        assert args.host == "192.168.1.100"
        assert args.port == 9000
        assert args.log_level == "debug"

    def test_invalid_log_level(self):
        """Test unknown log levels are rejected."""
        from sharebrowser.cli.serve import build_parser

        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "verbose"])
