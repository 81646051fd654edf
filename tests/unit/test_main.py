# tests/unit/test_main.py — v1
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from swiftpatterns.api.facade import PatternService
from swiftpatterns.api.models import ToolResponse
from swiftpatterns.main import _build_parser, main


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self, capsys):
        parser = _build_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_search_subcommand(self):
        args = _build_parser().parse_args(["search", "async await", "--code"])
        assert args.command == "search"
        assert args.query == "async await"
        assert args.code is True

    def test_pattern_defaults(self):
        args = _build_parser().parse_args(["pattern", "swiftui"])
        assert args.topic == "swiftui"
        assert args.source == "all"
        assert args.min_quality is None

    def test_pattern_options(self):
        args = _build_parser().parse_args(
            ["pattern", "actors", "--source", "vanderlee", "--min-quality", "70"]
        )
        assert args.source == "vanderlee"
        assert args.min_quality == 70

    def test_cache_subcommands(self):
        parser = _build_parser()
        assert parser.parse_args(["cache-clear"]).command == "cache-clear"
        assert parser.parse_args(["cache-sweep"]).command == "cache-sweep"

    def test_sources_subcommand(self):
        assert _build_parser().parse_args(["sources"]).command == "sources"


# ---------------------------------------------------------------------------
# main() integration
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_search_prints_response(self, settings, capsys):
        with patch("swiftpatterns.main.load_settings", return_value=settings), \
             patch.object(PatternService, "search", AsyncMock(return_value=ToolResponse(text="# Results"))):
            result = main(["search", "async"])
        assert result == 0
        assert "# Results" in capsys.readouterr().out

    def test_error_response_returns_1(self, settings):
        with patch("swiftpatterns.main.load_settings", return_value=settings), \
             patch.object(PatternService, "get_pattern", AsyncMock(return_value=ToolResponse.error("bad"))):
            assert main(["pattern", "async"]) == 1

    def test_cache_sweep(self, settings, capsys):
        with patch("swiftpatterns.main.load_settings", return_value=settings):
            result = main(["cache-sweep"])
        assert result == 0
        assert "Removed 0 expired entries" in capsys.readouterr().out

    def test_cache_clear(self, settings, capsys):
        with patch("swiftpatterns.main.load_settings", return_value=settings):
            assert main(["cache-clear"]) == 0
        assert "Cleared caches" in capsys.readouterr().out

    def test_fatal_error_returns_1(self):
        with patch("swiftpatterns.main.load_settings", side_effect=RuntimeError("boom")):
            assert main(["cache-sweep"]) == 1

    def test_sources_lists_registry(self, settings, capsys):
        with patch("swiftpatterns.main.load_settings", return_value=settings):
            assert main(["sources"]) == 0
        out = capsys.readouterr().out
        assert "# Content Sources" in out
        assert "`sundell`" in out
