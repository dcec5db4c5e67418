"""Tests for the JVM helpers and the cacerts adapter."""

import subprocess

import pytest

from ezproxy.adapters.base import CONFIGURED, NO_CERT, NOT_CONFIGURED, AdapterError
from ezproxy.adapters.java import (
    JAVA_CA_ALIAS,
    JavaCAAdapter,
    find_java_cacerts,
    parse_proxy_url,
    to_java_non_proxy_hosts,
)
from ezproxy.core.schema import Settings


class TestParseProxyUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://proxy.corp.com:8080", ("proxy.corp.com", "8080")),
            ("http://proxy.corp.com", ("proxy.corp.com", "80")),
            ("https://proxy.corp.com", ("proxy.corp.com", "443")),
            ("http://user:pw@proxy.corp.com:3128", ("proxy.corp.com", "3128")),
        ],
    )
    def test_parse(self, url, expected):
        assert parse_proxy_url(url) == expected

    def test_bad_port_falls_back(self):
        assert parse_proxy_url("http://proxy:notaport") == ("http://proxy:notaport", "8080")


class TestNonProxyHosts:
    def test_conversion(self):
        assert to_java_non_proxy_hosts("localhost, .corp.com,127.0.0.1") == "localhost|*.corp.com|127.0.0.1"

    def test_cidr_dropped(self):
        assert to_java_non_proxy_hosts("10.0.0.0/8,.corp.com,,") == "*.corp.com"

    def test_empty(self):
        assert to_java_non_proxy_hosts("") == ""


def _lister(imported: bool):
    calls = []

    def run(argv, **kwargs):
        calls.append(argv)
        stdout = f"{JAVA_CA_ALIAS}, Jan 1, 2026, trustedCertEntry,\n" if imported else ""
        return subprocess.CompletedProcess(argv, 0 if imported else 1, stdout=stdout, stderr="")

    run.calls = calls
    return run


@pytest.fixture
def cacerts(tmp_path):
    path = tmp_path / "cacerts"
    path.write_bytes(b"keystore")
    return path


class TestJavaCA:
    def test_imports_cert(self, cacerts, settings_with_cert, cert, ctx, fake_runner):
        JavaCAAdapter(cacerts=cacerts, lister=_lister(False)).apply(settings_with_cert, ctx)
        assert len(fake_runner.commands) == 1
        cmd = fake_runner.commands[0]
        assert cmd.startswith(f"keytool -importcert -alias {JAVA_CA_ALIAS} -file '{cert}'")
        assert f"-keystore '{cacerts}'" in cmd

    def test_already_imported(self, cacerts, settings_with_cert, ctx, fake_runner, console):
        JavaCAAdapter(cacerts=cacerts, lister=_lister(True)).apply(settings_with_cert, ctx)
        assert fake_runner.commands == []
        assert "already in JVM trust store" in console.file.getvalue()

    def test_dry_run_skips_lookup(self, cacerts, settings_with_cert, dry_ctx, fake_runner, console):
        lister = _lister(True)
        JavaCAAdapter(cacerts=cacerts, lister=lister).apply(settings_with_cert, dry_ctx)
        assert lister.calls == []
        assert fake_runner.commands == []
        assert "keytool -importcert" in console.file.getvalue()

    def test_no_cert_is_noop(self, cacerts, settings, ctx, fake_runner):
        JavaCAAdapter(cacerts=cacerts, lister=_lister(False)).apply(settings, ctx)
        assert fake_runner.commands == []

    def test_missing_cert_file(self, cacerts, settings, ctx):
        s = settings.model_copy(update={"ca_cert": "/nonexistent/ca.pem"})
        with pytest.raises(AdapterError, match="cert file not found"):
            JavaCAAdapter(cacerts=cacerts, lister=_lister(False)).apply(s, ctx)

    def test_keystore_not_found(self, settings_with_cert, ctx, fake_runner, console, monkeypatch):
        monkeypatch.setattr("ezproxy.adapters.java.find_java_cacerts", lambda: None)
        adapter = JavaCAAdapter(lister=_lister(False))
        adapter.apply(settings_with_cert, ctx)
        assert fake_runner.commands == []
        assert "Set JAVA_HOME" in console.file.getvalue()
        assert adapter.status(settings_with_cert, ctx) == "JVM cacerts not found"

    def test_remove(self, cacerts, ctx, fake_runner):
        JavaCAAdapter(cacerts=cacerts, lister=_lister(True)).remove(ctx)
        assert fake_runner.commands[0].startswith(f"keytool -delete -alias {JAVA_CA_ALIAS}")

    def test_remove_when_absent(self, cacerts, ctx, fake_runner):
        JavaCAAdapter(cacerts=cacerts, lister=_lister(False)).remove(ctx)
        assert fake_runner.commands == []

    def test_status(self, cacerts, settings, settings_with_cert, ctx):
        assert JavaCAAdapter(cacerts=cacerts, lister=_lister(True)).status(settings, ctx) == NO_CERT
        assert JavaCAAdapter(cacerts=cacerts, lister=_lister(True)).status(settings_with_cert, ctx) == CONFIGURED
        assert JavaCAAdapter(cacerts=cacerts, lister=_lister(False)).status(settings_with_cert, ctx) == NOT_CONFIGURED

    def test_lister_oserror(self, cacerts):
        def boom(argv, **kwargs):
            raise FileNotFoundError("keytool")

        assert not JavaCAAdapter(cacerts=cacerts, lister=boom).is_imported(cacerts)


class TestFindCacerts:
    def test_java_home(self, tmp_path, monkeypatch):
        store = tmp_path / "jdk" / "lib" / "security" / "cacerts"
        store.parent.mkdir(parents=True)
        store.write_bytes(b"")
        monkeypatch.setenv("JAVA_HOME", str(tmp_path / "jdk"))
        assert find_java_cacerts() == store

    def test_legacy_jre_layout(self, tmp_path, monkeypatch):
        store = tmp_path / "jdk" / "jre" / "lib" / "security" / "cacerts"
        store.parent.mkdir(parents=True)
        store.write_bytes(b"")
        monkeypatch.setenv("JAVA_HOME", str(tmp_path / "jdk"))
        assert find_java_cacerts() == store


def test_settings_without_cert_has_empty_path():
    assert Settings().ca_cert_path == ""
