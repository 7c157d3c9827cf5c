"""CLI tests for the ``eveonline`` Typer application.

Network access is replaced by an ``httpx.MockTransport`` injected through
:meth:`Client.from_config`; configuration is isolated under ``tmp_path``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from eveonline import __version__
from eveonline.app import app
from eveonline.client import Client
from eveonline.config import load_config, save_config
from eveonline.models import CacheBackend, CacheConfig, ClientConfig


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def api(monkeypatch: pytest.MonkeyPatch):
    """Route every client built by the CLI through a recording mock transport.

    Returns a dict: set ``body``/``status`` before invoking, inspect
    ``requests`` afterwards.
    """
    state: dict = {"body": b"", "status": 200, "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return httpx.Response(state["status"], content=state["body"])

    original = Client.from_config.__func__

    def from_config(cls, config, **kwargs):
        kwargs.setdefault("transport", httpx.MockTransport(handler))
        return original(cls, config, **kwargs)

    monkeypatch.setattr(Client, "from_config", classmethod(from_config))
    return state


# ---------------------------------------------------------------------------
# Root callback
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"eveonline {__version__}" in result.output

    def test_no_args_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, [])
        assert "fetch" in result.output
        assert "parse" in result.output


# ---------------------------------------------------------------------------
# fetch
# ---------------------------------------------------------------------------


class TestFetch:
    def test_fetch_prints_json(
        self, runner: CliRunner, isolated_config: Path, api: dict, server_status_xml: bytes
    ) -> None:
        api["body"] = server_status_xml
        result = runner.invoke(app, ["--json", "--no-color", "fetch", "server:ServerStatus"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["onlinePlayers"] == "38102"
        assert str(api["requests"][0].url) == "https://api.eveonline.com/server/ServerStatus.xml.aspx"

    def test_params_and_configured_key(
        self, runner: CliRunner, isolated_config: Path, api: dict, characters_xml: bytes
    ) -> None:
        save_config(ClientConfig(params={"keyID": "123", "vCode": "abc"}))
        api["body"] = characters_xml
        result = runner.invoke(
            app, ["--json", "--no-color", "fetch", "account:Characters", "-P", "keyID=999"]
        )
        assert result.exit_code == 0, result.output
        params = api["requests"][0].url.params
        assert params["keyID"] == "999"
        assert params["vCode"] == "abc"

    def test_url_option(
        self, runner: CliRunner, isolated_config: Path, api: dict, server_status_xml: bytes
    ) -> None:
        api["body"] = server_status_xml
        result = runner.invoke(
            app,
            ["--json", "--no-color", "fetch", "server:ServerStatus", "--url", "http://localhost:8080"],
        )
        assert result.exit_code == 0, result.output
        assert api["requests"][0].url.host == "localhost"

    def test_file_cache_serves_second_run(
        self, runner: CliRunner, isolated_config: Path, api: dict, server_status_xml: bytes
    ) -> None:
        api["body"] = server_status_xml
        args = ["--json", "--no-color", "fetch", "server:ServerStatus", "--cache", "file"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)
        assert first.exit_code == 0 and second.exit_code == 0
        assert len(api["requests"]) == 1
        assert json.loads(first.output) == json.loads(second.output)

    def test_invalid_param_exits_2(self, runner: CliRunner, isolated_config: Path, api: dict) -> None:
        result = runner.invoke(app, ["--no-color", "fetch", "server:ServerStatus", "-P", "novalue"])
        assert result.exit_code == 2
        assert "expected name=value" in result.output
        assert api["requests"] == []

    def test_api_error_exits_3(
        self, runner: CliRunner, isolated_config: Path, api: dict, error_xml: bytes
    ) -> None:
        api["body"] = error_xml
        api["status"] = 403
        result = runner.invoke(app, ["--no-color", "fetch", "account:Characters"])
        assert result.exit_code == 3
        assert "API error 106" in result.output

    def test_unsupported_status_exits_6(self, runner: CliRunner, isolated_config: Path, api: dict) -> None:
        api["status"] = 500
        result = runner.invoke(app, ["--no-color", "fetch", "server:ServerStatus"])
        assert result.exit_code == 6
        assert "Unsupported HTTP response: 500" in result.output

    def test_malformed_body_exits_7(self, runner: CliRunner, isolated_config: Path, api: dict) -> None:
        api["body"] = b"<eveapi><result>"
        result = runner.invoke(app, ["--no-color", "fetch", "server:ServerStatus"])
        assert result.exit_code == 7

    def test_unknown_cache_backend(self, runner: CliRunner, isolated_config: Path, api: dict) -> None:
        result = runner.invoke(app, ["--no-color", "fetch", "server:ServerStatus", "--cache", "redis"])
        assert result.exit_code == 1
        assert "Unknown cache backend" in result.output


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


class TestParse:
    def test_parse_saved_response(
        self, runner: CliRunner, isolated_config: Path, character_sheet_xml: bytes
    ) -> None:
        path = isolated_config / "CharacterSheet.xml"
        path.write_bytes(character_sheet_xml)
        result = runner.invoke(app, ["--json", "--no-color", "parse", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert "skills" in data
        assert "3431" in data["skills"]

    def test_parse_plain_output(
        self, runner: CliRunner, isolated_config: Path, server_status_xml: bytes
    ) -> None:
        path = isolated_config / "ServerStatus.xml"
        path.write_bytes(server_status_xml)
        result = runner.invoke(app, ["--plain", "--no-color", "parse", str(path)])
        assert result.exit_code == 0, result.output
        assert "onlinePlayers\t38102" in result.output

    def test_parse_error_document(self, runner: CliRunner, isolated_config: Path, error_xml: bytes) -> None:
        path = isolated_config / "Error.xml"
        path.write_bytes(error_xml)
        result = runner.invoke(app, ["--no-color", "parse", str(path)])
        assert result.exit_code == 3

    def test_parse_missing_file(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["parse", str(isolated_config / "missing.xml")])
        assert result.exit_code == 2

    def test_output_file(self, runner: CliRunner, isolated_config: Path, server_status_xml: bytes) -> None:
        path = isolated_config / "ServerStatus.xml"
        path.write_bytes(server_status_xml)
        out = isolated_config / "out.json"
        result = runner.invoke(app, ["-o", str(out), "parse", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["serverOpen"] == "True"


# ---------------------------------------------------------------------------
# cache
# ---------------------------------------------------------------------------


class TestCacheCommands:
    def test_cache_path(self, runner: CliRunner, isolated_config: Path) -> None:
        key = "https://api.eveonline.com/server/ServerStatus.xml.aspx"
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        expected = isolated_config / "cache" / "eveonline" / "files" / digest[:2] / digest[2:4] / digest

        result = runner.invoke(app, ["--no-color", "cache", "path", key])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == str(expected)

    def test_cache_clear_file_backend(
        self, runner: CliRunner, isolated_config: Path, api: dict, server_status_xml: bytes
    ) -> None:
        api["body"] = server_status_xml
        args = ["--json", "--no-color", "fetch", "server:ServerStatus", "--cache", "file"]
        assert runner.invoke(app, args).exit_code == 0

        result = runner.invoke(app, ["--no-color", "cache", "clear", "--cache", "file"])
        assert result.exit_code == 0, result.output
        assert "Cleared file cache." in result.output

        assert runner.invoke(app, args).exit_code == 0
        assert len(api["requests"]) == 2

    def test_cache_clear_uses_configured_backend(self, runner: CliRunner, isolated_config: Path) -> None:
        save_config(ClientConfig(cache=CacheConfig(backend=CacheBackend.DISK)))
        result = runner.invoke(app, ["--no-color", "cache", "clear"])
        assert result.exit_code == 0, result.output
        assert "Cleared disk cache." in result.output

    def test_cache_clear_memory_backend_warns(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "cache", "clear", "--cache", "memory"])
        assert result.exit_code == 0, result.output
        assert "Warning: The memory cache only lives inside a running client" in result.output
        assert "Cleared" not in result.output


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show_defaults(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--json", "-q", "config", "show"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["url"] == "https://api.eveonline.com"
        assert data["cache"]["backend"] == "memory"

    def test_set_nested_value(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "cache.backend", "file"])
        assert result.exit_code == 0, result.output
        assert load_config().cache.backend == CacheBackend.FILE

    def test_set_coerces_int_and_bool(self, runner: CliRunner, isolated_config: Path) -> None:
        assert runner.invoke(app, ["config", "set", "request.timeout", "10"]).exit_code == 0
        assert runner.invoke(app, ["config", "set", "request.verify_ssl", "false"]).exit_code == 0
        config = load_config()
        assert config.request.timeout == 10
        assert config.request.verify_ssl is False

    def test_set_new_param(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "params.keyID", "123456"])
        assert result.exit_code == 0, result.output
        assert load_config().params == {"keyID": "123456"}

    def test_set_unknown_key(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "nope", "x"])
        assert result.exit_code == 2
        assert "Unknown config key: nope" in result.output

    def test_set_invalid_backend(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "cache.backend", "redis"])
        assert result.exit_code == 2
        assert "Validation error" in result.output

    def test_set_bad_integer(self, runner: CliRunner, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "config", "set", "request.timeout", "soon"])
        assert result.exit_code == 2
        assert "Expected integer" in result.output
