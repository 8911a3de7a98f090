"""Test CLI commands via Typer's CliRunner against an in-memory registry."""

import json
import logging

import pytest
from conftest import FakeRegistry
from typer.testing import CliRunner

import repo_tree.cli as cli_module
from repo_tree import __version__
from repo_tree.cli import _friendly_error, app
from repo_tree.errors import ManifestError, RegistryError
from repo_tree.registry import RegistryConfig

runner = CliRunner()


@pytest.fixture
def registry(monkeypatch):
    """Route every RegistryClient the CLI creates to one FakeRegistry."""
    fake = FakeRegistry()
    created: list[RegistryConfig] = []

    def factory(config):
        created.append(config)
        fake.config = config
        return fake

    monkeypatch.setattr(cli_module, "RegistryClient", factory)
    fake.created = created
    return fake


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


# ── list ──────────────────────────────────────────────────────────────────


def test_list_prints_tree(registry):
    result = runner.invoke(app, ["--registry", "http://registry.test", "list"])
    assert result.exit_code == 0, result.stdout
    assert "├── a" in result.stdout
    assert "│   │   └── 1.0" in result.stdout
    assert "        └── latest" in result.stdout
    assert registry.closed


def test_list_json(registry):
    result = runner.invoke(app, ["list", "--output", "json"])
    assert result.exit_code == 0, result.stdout
    paths = [row["Path"] for row in json.loads(result.stdout)]
    assert paths == ["a", "a/x", "a/x/1.0", "a/y", "b", "b/z", "b/z/2.0", "b/z/latest"]


def test_registry_flag_reaches_client(registry):
    runner.invoke(app, ["-r", "registry.internal:5000/", "list"])
    assert registry.created[0].url == "http://registry.internal:5000"


def test_registry_from_environment(registry):
    result = runner.invoke(app, ["list"], env={"REPO_TREE_REGISTRY": "http://env.test"})
    assert result.exit_code == 0, result.stdout
    assert registry.created[0].url == "http://env.test"


def test_empty_registry_exits_nonzero(registry):
    registry.repositories = []
    result = runner.invoke(app, ["--registry", "http://down.test", "list"])
    assert result.exit_code == 1
    assert "Could not connect to the registry" in result.output
    assert "http://down.test" in result.output


def test_browse_exits_before_tui_when_empty(registry, monkeypatch):
    registry.repositories = []
    launched = []
    monkeypatch.setattr("repo_tree.tui.app.RepoTreeApp.run", lambda self: launched.append(self))
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert launched == []


def test_no_subcommand_launches_tui(registry, monkeypatch):
    launched = []
    monkeypatch.setattr("repo_tree.tui.app.RepoTreeApp.run", lambda self: launched.append(self))
    result = runner.invoke(app, ["--registry", "http://registry.test"])
    assert result.exit_code == 0, result.output
    assert len(launched) == 1
    assert [r.full_path for r in launched[0].rows][:3] == ["a", "a/x", "a/x/1.0"]
    assert launched[0].client is registry


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_log_file_receives_records(registry, monkeypatch, tmp_path, restore_root_logger):
    monkeypatch.setattr("repo_tree.tui.app.RepoTreeApp.run", lambda self: None)
    log_path = tmp_path / "repo-tree.log"
    result = runner.invoke(
        app, ["--registry", "http://registry.test", "--log-file", str(log_path)]
    )
    assert result.exit_code == 0, result.output
    assert "Loaded 8 rows from http://registry.test" in log_path.read_text()


def test_config_error_exits(isolated_config):
    isolated_config.write_text("registry: ${UNSET_FOR_TEST}\n")
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Config error" in result.output


# ── history ───────────────────────────────────────────────────────────────


def test_history(registry):
    result = runner.invoke(app, ["history", "b/z", "2.0"])
    assert result.exit_code == 0, result.stdout
    assert "b/z:2.0" in result.stdout
    assert "3f1c2d4e" in result.stdout
    assert "schemaVersion" not in result.stdout


def test_history_raw(registry):
    result = runner.invoke(app, ["history", "b/z", "2.0", "--raw"])
    assert result.exit_code == 0, result.stdout
    assert "schemaVersion" in result.stdout


def test_history_csv(registry):
    result = runner.invoke(app, ["history", "b/z", "2.0", "-o", "csv"])
    assert result.exit_code == 0, result.stdout
    assert result.stdout.splitlines()[0] == "id,parent,os,created,Cmd,config"


def test_history_not_found(registry):
    result = runner.invoke(app, ["history", "b/z", "missing"])
    assert result.exit_code == 1
    assert "Not found" in result.output
    assert "b/z:missing" in result.output


# ── friendly errors ───────────────────────────────────────────────────────


def test_friendly_error_connection(capsys):
    config = RegistryConfig(url="http://nowhere.test")
    with pytest.raises(SystemExit):
        _friendly_error(RegistryError("Request to _catalog failed: refused"), config)
    captured = capsys.readouterr()
    assert "Connection failed" in captured.err
    assert "http://nowhere.test" in captured.err


def test_friendly_error_access_denied(capsys):
    with pytest.raises(SystemExit):
        _friendly_error(RegistryError("nope", status_code=401), RegistryConfig())
    assert "Access denied" in capsys.readouterr().err


def test_friendly_error_manifest(capsys):
    with pytest.raises(SystemExit):
        _friendly_error(ManifestError("Manifest must be a JSON object"), RegistryConfig(), "a:b")
    assert "Unexpected manifest" in capsys.readouterr().err


def test_friendly_error_generic(capsys):
    with pytest.raises(SystemExit):
        _friendly_error(ValueError("Some random error"), RegistryConfig())
    captured = capsys.readouterr()
    assert "Error:" in captured.err
    assert "Some random error" in captured.err
