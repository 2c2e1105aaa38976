import json

import pytest
from typer.testing import CliRunner

from inliner.images.cli import cli

runner = CliRunner()


def test_url():
    result = runner.invoke(cli, ["url", "zoo", "Happy Duck!!", "800", "600"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "https://img.inliner.ai/zoo/happy-duck_800x600.png"
    assert lines[1].startswith('<img src="https://img.inliner.ai/zoo/happy-duck_800x600.png"')


def test_url_with_edit_and_format():
    result = runner.invoke(
        cli, ["url", "zoo", "duck", "800", "600", "--format", "jpg", "--edit", "Make it Blue"]
    )
    assert result.exit_code == 0
    assert result.output.splitlines()[0].endswith("/zoo/duck_800x600/make-it-blue.jpg")


def test_url_invalid():
    result = runner.invoke(cli, ["url", "zoo", "!!!", "800", "600"])
    assert result.exit_code == 1
    assert "no usable characters" in result.output


def test_dimensions():
    result = runner.invoke(cli, ["dimensions", "social"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["useCase"] == "social"
    assert data["recommended"][0]["width"] == 1200


def test_dimensions_unknown():
    result = runner.invoke(cli, ["dimensions", "poster"])
    assert result.exit_code == 1


def test_serve_requires_api_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("INLINER_API_KEY", raising=False)
    result = runner.invoke(cli, ["serve"])
    assert result.exit_code == 1
    assert "INLINER_API_KEY" in result.output


def test_serve_runs_server(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def fake_run(self, transport: str) -> None:
        calls.append((self.name, transport))

    monkeypatch.setattr("mcp.server.fastmcp.FastMCP.run", fake_run)
    result = runner.invoke(cli, ["serve", "--api-key", "abc"])
    assert result.exit_code == 0, result.output
    assert calls == [("inliner", "stdio")]
