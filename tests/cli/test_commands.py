"""Integration tests for CLI commands via typer.testing.CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from ezproxy._entry import main, split_global_flags
from ezproxy.cli.main import app
from ezproxy.core.settings import SettingsStore

PROXY = "http://proxy.corp.com:8080"
NO_PROXY = "localhost,127.0.0.1,.corp.com"

runner = CliRunner()


@pytest.fixture
def adapters(monkeypatch, make_adapter):
    """Three fake adapters in place of the real registry."""
    fakes = [make_adapter("alpha"), make_adapter("beta"), make_adapter("ssh")]
    monkeypatch.setattr("ezproxy.cli.main.get_adapters", lambda: fakes)
    return fakes


@pytest.fixture
def store(config_path, settings):
    """Settings already written, ssh off like a fresh init."""
    s = SettingsStore(config_path)
    s.save(settings.with_tools({"alpha": True, "beta": True, "ssh": False}))
    return s


def invoke(args, ctx):
    return runner.invoke(app, args, obj=ctx)


class TestInit:
    def test_writes_settings(self, config_path, adapters, ctx):
        result = invoke(["init", "--http", PROXY, "--no-proxy", NO_PROXY], ctx)
        assert result.exit_code == 0, result.output

        loaded = SettingsStore(config_path).load()
        assert loaded.proxy.http == PROXY
        assert loaded.proxy.https == PROXY
        assert loaded.proxy.no_proxy == NO_PROXY
        assert loaded.ca_cert == ""
        assert loaded.tools == {"alpha": True, "beta": True, "ssh": False}

    def test_requires_http(self, config_path, adapters, ctx):
        result = invoke(["init"], ctx)
        assert result.exit_code == 1
        assert not config_path.exists()

    def test_existing_without_force(self, store, adapters, ctx):
        before = store.path.read_text()
        result = invoke(["init", "--http", "http://new:1"], ctx)
        assert result.exit_code == 1
        assert store.path.read_text() == before

    def test_force_keeps_tools(self, store, adapters, ctx):
        store.save_tools(store.load(), {"alpha": False, "beta": True, "ssh": False})
        result = invoke(["init", "--force", "--http", "http://new:1"], ctx)
        assert result.exit_code == 0, result.output

        loaded = store.load()
        assert loaded.proxy.http == "http://new:1"
        assert loaded.tools == {"alpha": False, "beta": True, "ssh": False}

    def test_dry_run(self, config_path, adapters, ctx, console):
        result = invoke(["--dry-run", "init", "--http", PROXY], ctx)
        assert result.exit_code == 0, result.output
        assert not config_path.exists()
        out = console.file.getvalue()
        assert f"[dry-run] Would write {config_path}:" in out
        assert f"http: {PROXY}" in out


class TestApply:
    def test_missing_settings(self, config_path, adapters, ctx):
        result = invoke(["apply"], ctx)
        assert result.exit_code == 1
        assert all(a.calls == [] for a in adapters)

    def test_runs_enabled_adapters(self, store, adapters, ctx, console):
        result = invoke(["apply"], ctx)
        assert result.exit_code == 0, result.output
        assert adapters[0].calls == ["is_available", "apply"]
        assert adapters[1].calls == ["is_available", "apply"]
        assert adapters[2].calls == []
        assert "skipped (disabled)" in console.file.getvalue()

    def test_partial_failure_exits_zero(self, store, adapters, ctx, console):
        adapters[1].error = OSError("disk full")
        result = invoke(["apply"], ctx)
        assert result.exit_code == 0
        assert adapters[0].calls == ["is_available", "apply"]
        out = console.file.getvalue()
        assert "disk full" in out
        assert "1 failed: beta" in out

    def test_dry_run_banner(self, store, adapters, ctx, console):
        result = invoke(["--dry-run", "apply"], ctx)
        assert result.exit_code == 0, result.output
        assert "[dry-run] No changes will be written." in console.file.getvalue()


class TestRemove:
    def test_runs_remove(self, store, adapters, ctx):
        result = invoke(["remove"], ctx)
        assert result.exit_code == 0, result.output
        assert adapters[0].calls == ["is_available", "remove"]
        assert adapters[2].calls == []


class TestStatus:
    def test_json(self, store, adapters, ctx):
        result = invoke(["status", "--format", "json"], ctx)
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [(r["tool"], r["status"]) for r in data] == [
            ("alpha", "configured"),
            ("beta", "configured"),
            ("ssh", "disabled"),
        ]
        assert adapters[2].calls == []

    def test_error_is_reported(self, store, adapters, ctx):
        adapters[1].error = RuntimeError("cannot read")
        result = invoke(["status", "--format", "json"], ctx)
        assert result.exit_code == 0
        beta = json.loads(result.stdout)[1]
        assert beta == {"tool": "beta", "status": "unknown", "error": "cannot read"}

    def test_text(self, store, adapters, ctx):
        result = invoke(["status", "--format", "text"], ctx)
        assert result.exit_code == 0, result.output
        assert "alpha" in result.stdout
        assert "disabled" in result.stdout

    def test_missing_settings(self, config_path, adapters, ctx):
        assert invoke(["status"], ctx).exit_code == 1


class TestList:
    def test_defaults_without_settings(self, config_path, adapters, ctx):
        adapters[1].available = False
        result = invoke(["list", "--format", "json"], ctx)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"tool": "alpha", "enabled": "yes", "available": "yes"},
            {"tool": "beta", "enabled": "yes", "available": "no"},
            {"tool": "ssh", "enabled": "no", "available": "yes"},
        ]

    def test_uses_stored_map(self, store, adapters, ctx):
        store.save_tools(store.load(), {"alpha": False, "beta": True, "ssh": True})
        result = invoke(["list", "--format", "json"], ctx)
        enabled = {r["tool"]: r["enabled"] for r in json.loads(result.stdout)}
        assert enabled == {"alpha": "no", "beta": "yes", "ssh": "yes"}


class TestEnableDisable:
    def test_disable_persists_and_removes(self, store, adapters, ctx):
        result = invoke(["disable", "alpha"], ctx)
        assert result.exit_code == 0, result.output
        assert store.load().tools["alpha"] is False
        assert adapters[0].calls == ["is_available", "remove"]
        assert adapters[1].calls == []

    def test_enable_applies(self, store, adapters, ctx):
        result = invoke(["enable", "ssh"], ctx)
        assert result.exit_code == 0, result.output
        assert store.load().tools["ssh"] is True
        assert adapters[2].calls == ["is_available", "apply"]

    def test_already_enabled(self, store, adapters, ctx):
        result = invoke(["enable", "alpha"], ctx)
        assert result.exit_code == 0
        assert "alpha is already enabled" in result.output
        assert adapters[0].calls == []

    def test_unknown_tool(self, config_path, adapters, ctx):
        result = invoke(["enable", "nonexistent"], ctx)
        assert result.exit_code == 1

    def test_persisted_before_adapter_runs(self, store, adapters, ctx):
        seen = {}

        def apply(settings, run_ctx):
            seen["tools"] = SettingsStore(store.path).load().tools

        adapters[2].apply = apply
        result = invoke(["enable", "ssh"], ctx)
        assert result.exit_code == 0, result.output
        assert seen["tools"]["ssh"] is True

    def test_dry_run_keeps_file(self, store, adapters, ctx):
        before = store.path.read_text()
        result = invoke(["--dry-run", "disable", "alpha"], ctx)
        assert result.exit_code == 0, result.output
        assert store.path.read_text() == before


class TestEntryPoint:
    def test_split_global_flags(self):
        assert split_global_flags(["status", "-v", "--format", "json", "--", "--dry-run"]) == [
            "-v",
            "status",
            "--format",
            "json",
            "--",
            "--dry-run",
        ]

    def test_flags_after_subcommand(self, store, adapters, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["apply", "--dry-run", "-y"])
        assert exc.value.code == 0
        assert "[dry-run] No changes will be written." in capsys.readouterr().out

    def test_unknown_command_exits_one(self, config_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["frobnicate"])
        assert exc.value.code == 1

    def test_bad_option_exits_one(self, store, adapters, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["status", "--bogus"])
        assert exc.value.code == 1
