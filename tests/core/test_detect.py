"""Tests for OS, shell and command detection."""

from pathlib import Path

from ezproxy.utils.detect import OSInfo, command_available, detect_os, detect_shell, expand_path


class TestDetectOS:
    def test_distro_from_os_release(self, tmp_path, monkeypatch):
        release = tmp_path / "os-release"
        release.write_text('NAME="Ubuntu"\nID=ubuntu\nID_LIKE=debian\n')
        monkeypatch.setattr("ezproxy.utils.detect.platform.system", lambda: "Linux")
        info = detect_os(release)
        assert info == OSInfo(os="linux", distro="ubuntu")
        assert info.is_debian()

    def test_quoted_id(self, tmp_path, monkeypatch):
        release = tmp_path / "os-release"
        release.write_text('ID="rocky"\n')
        monkeypatch.setattr("ezproxy.utils.detect.platform.system", lambda: "Linux")
        assert detect_os(release).is_rhel()

    def test_missing_os_release(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ezproxy.utils.detect.platform.system", lambda: "Linux")
        info = detect_os(tmp_path / "nope")
        assert info.is_linux
        assert info.distro == ""
        assert not (info.is_debian() or info.is_rhel() or info.is_arch())

    def test_darwin(self, monkeypatch):
        monkeypatch.setattr("ezproxy.utils.detect.platform.system", lambda: "Darwin")
        info = detect_os(Path("/nonexistent"))
        assert info.is_darwin
        assert not info.is_linux


class TestCommands:
    def test_command_available(self, tmp_path, monkeypatch):
        tool = tmp_path / "mytool"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)
        monkeypatch.setenv("PATH", str(tmp_path))
        assert command_available("mytool")
        assert command_available("missing", "mytool")
        assert not command_available("missing")


class TestShell:
    def test_detect_shell(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/local/bin/fish")
        assert detect_shell() == "fish"

    def test_no_shell(self, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)
        assert detect_shell() == ""


class TestExpandPath:
    def test_tilde(self, home):
        assert expand_path("~/ca.pem") == str(home / "ca.pem")

    def test_other_paths_untouched(self):
        assert expand_path("/etc/ca.pem") == "/etc/ca.pem"
        assert expand_path("") == ""
