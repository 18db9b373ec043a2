"""Tests for installer backends and the install orchestrator."""

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
import semantic_version

from errors import ExternalToolFailedError, InstallationIncompleteError
from installer import (
    CargoBinstallBackend,
    CargoInstallBackend,
    InstallOptions,
    ensure_installed,
    finalize_installation,
    select_backend,
)
from versioning.models import ResolvedTarget

V123 = semantic_version.Version("1.2.3")
ROOT = Path("/opt/cargox-root")


def target(version=V123, name="tool", binary="tool"):
    return ResolvedTarget(name=name, resolved_version=version, binary_name=binary)


class FakeInstaller:
    """Stands in for subprocess.run: records calls and drops a binary into bin/."""

    def __init__(self, install_root: Path, binary="tool", content="built", returncode=0):
        self.install_root = install_root
        self.binary = binary
        self.content = content
        self.returncode = returncode
        self.calls = []

    def __call__(self, command, env=None, check=False):
        self.calls.append({
            "command": command,
            "env": dict(env or {}),
            "target_dir_existed": bool(env and env.get("CARGO_TARGET_DIR")
                                       and os.path.isdir(env["CARGO_TARGET_DIR"])),
        })
        if self.returncode == 0 and self.binary:
            (self.install_root / "bin" / self.binary).write_text(self.content)
        return subprocess.CompletedProcess(command, self.returncode)


class TestBinstallCommand:
    """Tests for the cargo-binstall command line."""

    def test_minimal(self):
        cmd = CargoBinstallBackend().build_command(target(), InstallOptions(), ROOT)
        assert cmd == ["cargo", "binstall", "--no-confirm", "tool@1.2.3"]

    def test_all_flags(self):
        opts = InstallOptions(quiet=True, force=True, bin_name="tb")
        cmd = CargoBinstallBackend().build_command(target(binary="tb"), opts, ROOT)
        assert cmd == ["cargo", "binstall", "--quiet", "--no-confirm", "--force",
                       "--bin", "tb", "tool@1.2.3"]

    def test_unversioned(self):
        cmd = CargoBinstallBackend().build_command(target(version=None), InstallOptions(), ROOT)
        assert cmd[-1] == "tool"


class TestCargoInstallCommand:
    """Tests for the cargo install command line."""

    def test_minimal(self):
        cmd = CargoInstallBackend().build_command(target(), InstallOptions(), ROOT)
        assert cmd == ["cargo", "install", "--root", str(ROOT), "tool", "--version", "1.2.3"]

    def test_all_flags(self):
        opts = InstallOptions(quiet=True, force=True, bin_name="tb")
        cmd = CargoInstallBackend().build_command(target(binary="tb"), opts, ROOT)
        assert cmd == ["cargo", "install", "--quiet", "--force", "--root", str(ROOT),
                       "tool", "--version", "1.2.3", "--bin", "tb"]

    def test_unversioned_omits_version(self):
        cmd = CargoInstallBackend().build_command(target(version=None), InstallOptions(), ROOT)
        assert "--version" not in cmd


class TestSelectBackend:
    """Tests for select_backend()."""

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_prefers_binstall(self, _which):
        assert isinstance(select_backend(InstallOptions()), CargoBinstallBackend)

    @patch("installer.orchestrator.shutil.which", return_value=None)
    def test_falls_back_when_binstall_missing(self, _which, caplog):
        caplog.set_level("INFO")
        assert isinstance(select_backend(InstallOptions()), CargoInstallBackend)
        assert "cargo-binstall not found" in caplog.text

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_source_build_requested(self, which, caplog):
        caplog.set_level("INFO")
        backend = select_backend(InstallOptions(build_from_source=True))
        assert isinstance(backend, CargoInstallBackend)
        assert "requested" in caplog.text
        which.assert_not_called()


class TestBackendInstall:
    """Tests for the shared subprocess handling."""

    def test_sandboxed_env_passed(self, install_root, monkeypatch):
        monkeypatch.setenv("CARGO_HOME", "/ambient/cargo")
        monkeypatch.setenv("RUSTUP_TOOLCHAIN", "nightly")
        (install_root / "bin").mkdir(parents=True)
        fake = FakeInstaller(install_root)
        with patch("installer.base.subprocess.run", side_effect=fake):
            CargoBinstallBackend().install(target(), InstallOptions(), install_root)

        env = fake.calls[0]["env"]
        assert env["CARGO_INSTALL_ROOT"] == str(install_root)
        assert "CARGO_HOME" not in env
        assert "RUSTUP_TOOLCHAIN" not in env
        assert "CARGO_TARGET_DIR" not in env

    def test_scratch_dir_set_and_removed(self, install_root, monkeypatch):
        monkeypatch.setenv("CARGO_TARGET_DIR", "/ambient/target")
        (install_root / "bin").mkdir(parents=True)
        fake = FakeInstaller(install_root)
        with patch("installer.base.subprocess.run", side_effect=fake):
            CargoInstallBackend().install(target(), InstallOptions(), install_root)

        call = fake.calls[0]
        scratch = call["env"]["CARGO_TARGET_DIR"]
        assert scratch != "/ambient/target"
        assert call["target_dir_existed"]
        assert not os.path.exists(scratch)

    def test_scratch_dir_removed_on_failure(self, install_root):
        (install_root / "bin").mkdir(parents=True)
        fake = FakeInstaller(install_root, returncode=101)
        with patch("installer.base.subprocess.run", side_effect=fake):
            with pytest.raises(ExternalToolFailedError) as exc_info:
                CargoInstallBackend().install(target(), InstallOptions(), install_root)

        assert exc_info.value.status == 101
        assert "101" in str(exc_info.value)
        assert not os.path.exists(fake.calls[0]["env"]["CARGO_TARGET_DIR"])

    def test_signal_status(self, install_root):
        (install_root / "bin").mkdir(parents=True)
        fake = FakeInstaller(install_root, returncode=-9)
        with patch("installer.base.subprocess.run", side_effect=fake):
            with pytest.raises(ExternalToolFailedError) as exc_info:
                CargoBinstallBackend().install(target(), InstallOptions(), install_root)
        assert exc_info.value.status == "signal"
        assert str(exc_info.value) == "cargo-binstall exited with status code signal"

    def test_tool_cannot_be_spawned(self, install_root):
        with patch("installer.base.subprocess.run", side_effect=FileNotFoundError("cargo")):
            with pytest.raises(ExternalToolFailedError) as exc_info:
                CargoBinstallBackend().install(target(), InstallOptions(), install_root)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)


class TestFinalizeInstallation:
    """Tests for finalize_installation()."""

    def test_moves_binary_to_versioned_path(self, install_root):
        (install_root / "bin").mkdir(parents=True)
        (install_root / "bin" / "tool").write_text("v1")

        path = finalize_installation(install_root, "tool", V123)

        assert path == install_root / "tool-1.2.3"
        assert path.read_text() == "v1"
        assert not (install_root / "bin" / "tool").exists()

    def test_overwrites_existing(self, install_root):
        (install_root / "bin").mkdir(parents=True)
        (install_root / "tool-1.2.3").write_text("old")
        (install_root / "bin" / "tool").write_text("new")

        finalize_installation(install_root, "tool", V123)

        assert (install_root / "tool-1.2.3").read_text() == "new"

    def test_stays_under_given_root(self, install_root, tmp_path):
        other = tmp_path / "other"
        (other / "bin").mkdir(parents=True)
        (other / "bin" / "tool").write_text("v1")

        path = finalize_installation(other, "tool", V123)

        assert path == other / "tool-1.2.3"
        assert path.read_text() == "v1"
        assert not install_root.exists()

    def test_missing_binary(self, install_root):
        (install_root / "bin").mkdir(parents=True)
        with pytest.raises(InstallationIncompleteError) as exc_info:
            finalize_installation(install_root, "tool", V123)
        assert exc_info.value.path == install_root / "bin" / "tool"


class TestEnsureInstalled:
    """Tests for ensure_installed()."""

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_installs_and_finalizes(self, _which, install_root):
        fake = FakeInstaller(install_root)
        with patch("installer.base.subprocess.run", side_effect=fake):
            ensure_installed(target(), InstallOptions())

        assert len(fake.calls) == 1
        assert fake.calls[0]["command"][:2] == ["cargo", "binstall"]
        assert (install_root / "tool-1.2.3").read_text() == "built"

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_cached_version_skips_tools(self, _which, install_root):
        install_root.mkdir(parents=True)
        (install_root / "tool-1.2.3").write_text("cached")
        with patch("installer.base.subprocess.run") as run:
            ensure_installed(target(), InstallOptions())
        run.assert_not_called()

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_reinstall_same_version_leaves_one_binary(self, _which, install_root):
        with patch("installer.base.subprocess.run", side_effect=FakeInstaller(install_root, content="first")):
            ensure_installed(target(), InstallOptions())
        second = FakeInstaller(install_root, content="second")
        with patch("installer.base.subprocess.run", side_effect=second):
            ensure_installed(target(), InstallOptions(force=True))

        assert "--force" in second.calls[0]["command"]
        versioned = [p.name for p in install_root.iterdir() if p.name.startswith("tool-")]
        assert versioned == ["tool-1.2.3"]
        assert (install_root / "tool-1.2.3").read_text() == "second"

    @patch("installer.orchestrator.shutil.which", return_value=None)
    def test_backend_reports_success_without_binary(self, _which, install_root):
        fake = FakeInstaller(install_root, binary=None)
        with patch("installer.base.subprocess.run", side_effect=fake):
            with pytest.raises(InstallationIncompleteError):
                ensure_installed(target(), InstallOptions())

    @patch("installer.orchestrator.shutil.which", return_value="/usr/bin/cargo-binstall")
    def test_failure_is_not_retried_with_other_backend(self, _which, install_root):
        fake = FakeInstaller(install_root, returncode=1)
        with patch("installer.base.subprocess.run", side_effect=fake):
            with pytest.raises(ExternalToolFailedError):
                ensure_installed(target(), InstallOptions())
        assert len(fake.calls) == 1

    @patch("installer.orchestrator.shutil.which", return_value=None)
    def test_unversioned_install_stays_in_bin(self, _which, install_root):
        fake = FakeInstaller(install_root)
        with patch("installer.base.subprocess.run", side_effect=fake):
            ensure_installed(target(version=None), InstallOptions())
        assert (install_root / "bin" / "tool").exists()
        assert "--version" not in fake.calls[0]["command"]
