"""
Unit tests for the command-line interface.
"""

import argparse

import pytest

from tinyhttpd import __version__
from tinyhttpd.__main__ import build_parser, config_from_args, main, port_number


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DOCUMENT_ROOT", "HTTP_INDEX_FILE",
                 "HTTP_TIMEOUT", "HTTP_LOG_LEVEL", "HTTP_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)


class TestPortNumber:
    """Tests for the port_number argparse type."""

    @pytest.mark.parametrize("value, expected", [("1", 1), ("8080", 8080), ("65535", 65535)])
    def test_valid(self, value: str, expected: int):
        assert port_number(value) == expected

    @pytest.mark.parametrize("value", ["0", "-1", "65536", "abc", "80.5", ""])
    def test_invalid(self, value: str):
        with pytest.raises(argparse.ArgumentTypeError):
            port_number(value)


class TestParser:
    """Tests for argument parsing and config merging."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        config = config_from_args(args)

        assert config.port == 8080
        assert config.host == "0.0.0.0"
        assert config.document_root == "public"

    def test_positional_port(self):
        args = build_parser().parse_args(["3000"])
        assert config_from_args(args).port == 3000

    def test_options(self):
        args = build_parser().parse_args([
            "9000", "--host", "127.0.0.1", "--root", "/srv/www", "--index", "home.html",
            "--log-level", "DEBUG", "--log-format", "json",
        ])
        config = config_from_args(args)

        assert config.host == "127.0.0.1"
        assert config.document_root == "/srv/www"
        assert config.index_file == "home.html"
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_cli_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "7000")
        monkeypatch.setenv("HTTP_HOST", "10.0.0.1")

        config = config_from_args(build_parser().parse_args(["7001"]))

        assert config.port == 7001
        assert config.host == "10.0.0.1"

    @pytest.mark.parametrize("port", ["abc", "0", "-5", "70000"])
    def test_invalid_port_exits_2(self, port: str, capsys):
        """Test that a bad port stops the process before any socket exists."""
        with pytest.raises(SystemExit) as exc_info:
            main([port])

        assert exc_info.value.code == 2
        assert "invalid port" in capsys.readouterr().err

    def test_bad_environment_exits_2(self, monkeypatch):
        monkeypatch.setenv("HTTP_LOG_FORMAT", "xml")

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_environment_port_out_of_range_exits_2(self, port: str, monkeypatch, capsys):
        monkeypatch.setenv("HTTP_PORT", port)

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
        assert "HTTP_PORT" in capsys.readouterr().err

    def test_environment_port_zero_rejected(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "0")

        with pytest.raises(ValueError):
            config_from_args(build_parser().parse_args([]))

    def test_positional_port_overrides_bad_environment_port(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "0")

        assert config_from_args(build_parser().parse_args(["8081"])).port == 8081

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Tests for main() with the server stubbed out."""

    def test_runs_server(self, monkeypatch):
        calls = []

        def fake_run(self):
            calls.append((self.config.port, self.config.document_root))

        monkeypatch.setattr("tinyhttpd.__main__.HTTPServer.run", fake_run)

        assert main(["4321", "--root", "site"]) == 0
        assert calls == [(4321, "site")]

    def test_bind_failure_returns_1(self, monkeypatch, capsys):
        def fake_run(self):
            raise OSError("Address already in use")

        monkeypatch.setattr("tinyhttpd.__main__.HTTPServer.run", fake_run)

        assert main(["4321"]) == 1
        assert "Address already in use" in capsys.readouterr().err
