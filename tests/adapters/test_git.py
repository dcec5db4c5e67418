"""Tests for the git adapter against a scratch config file."""

import shutil

import pytest

from ezproxy.adapters.base import CONFIGURED, NOT_CONFIGURED, STALE
from ezproxy.adapters.git import GitAdapter
from ezproxy.core.schema import ProxySettings

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def adapter(tmp_path):
    return GitAdapter(config_file=str(tmp_path / "gitconfig"))


def test_apply_sets_proxy_and_ca(adapter, settings_with_cert, cert, ctx):
    adapter.apply(settings_with_cert, ctx)
    assert adapter.get("http.proxy") == "http://proxy.corp.com:8080"
    assert adapter.get("http.sslCAInfo") == str(cert)


def test_apply_without_cert(adapter, settings, ctx):
    adapter.apply(settings, ctx)
    assert adapter.get("http.sslCAInfo") == ""


def test_status(adapter, settings, ctx):
    assert adapter.status(settings, ctx) == NOT_CONFIGURED
    adapter.apply(settings, ctx)
    assert adapter.status(settings, ctx) == CONFIGURED
    moved = settings.model_copy(update={"proxy": ProxySettings(http="http://new:1")})
    assert adapter.status(moved, ctx) == STALE


def test_remove_is_idempotent(adapter, settings, ctx):
    adapter.apply(settings, ctx)
    adapter.remove(ctx)
    assert adapter.get("http.proxy") == ""
    adapter.remove(ctx)


def test_dry_run(adapter, tmp_path, settings, dry_ctx, console):
    adapter.apply(settings, dry_ctx)
    assert not (tmp_path / "gitconfig").exists()
    assert "git config --file" in console.file.getvalue()
    assert "http.proxy http://proxy.corp.com:8080" in console.file.getvalue()
