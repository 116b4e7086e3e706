"""
Unit tests for the command-line entry point.
"""

import pytest

from basic_http_server.__main__ import build_parser, main


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.root == "."
        assert args.addr == "127.0.0.1:4000"
        assert args.use_extensions is False
        assert args.log_level == "INFO"
        assert args.access_log == "text"

    def test_all_options(self):
        args = build_parser().parse_args(["./site", "-a", "0.0.0.0:80", "-x", "-l", "DEBUG", "--access-log", "json"])

        assert args.root == "./site"
        assert args.addr == "0.0.0.0:80"
        assert args.use_extensions is True
        assert args.log_level == "DEBUG"
        assert args.access_log == "json"

    def test_unknown_access_log_format(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--access-log", "xml"])

        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "basic-http-server" in capsys.readouterr().out


class TestMain:
    """Tests for startup failures."""

    def test_bad_address(self, tmp_path, capsys):
        assert main([str(tmp_path), "-a", "not-an-address"]) == 1

        err = capsys.readouterr().err
        assert err.startswith("error: ")
        assert "invalid socket address syntax" in err

    def test_missing_root(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing")]) == 1
        assert "Root directory does not exist" in capsys.readouterr().err
