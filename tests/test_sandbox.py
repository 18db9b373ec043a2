"""Tests for the sandboxed installer environment."""

from pathlib import Path

from installer.sandbox import SCRUBBED_VARIABLES, build_sandboxed_env

ROOT = Path("/opt/cargox-root")


class TestBuildSandboxedEnv:
    """Tests for build_sandboxed_env()."""

    def test_scrubs_every_listed_variable(self):
        base = {var: f"/ambient/{var.lower()}" for var in SCRUBBED_VARIABLES}
        base["SOME_OTHER_VAR"] = "should_remain"

        env = build_sandboxed_env(ROOT, base)

        assert env["SOME_OTHER_VAR"] == "should_remain"
        for var in SCRUBBED_VARIABLES:
            if var == "CARGO_INSTALL_ROOT":
                continue
            assert var not in env
        assert env["CARGO_INSTALL_ROOT"] == str(ROOT)

    def test_exactly_one_install_root_variable(self):
        base = {var: "/ambient" for var in SCRUBBED_VARIABLES}
        env = build_sandboxed_env(ROOT, base)
        injected = [k for k, v in env.items() if v == str(ROOT)]
        assert injected == ["CARGO_INSTALL_ROOT"]
        assert set(env) == {"CARGO_INSTALL_ROOT"}

    def test_base_env_not_mutated(self):
        base = {"CARGO_HOME": "/home/u/.cargo", "PATH": "/usr/bin"}
        build_sandboxed_env(ROOT, base)
        assert base == {"CARGO_HOME": "/home/u/.cargo", "PATH": "/usr/bin"}

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("CARGO_HOME", "/home/u/.cargo")
        monkeypatch.setenv("CARGOX_TEST_MARKER", "1")
        env = build_sandboxed_env(ROOT)
        assert env["CARGOX_TEST_MARKER"] == "1"
        assert "CARGO_HOME" not in env

    def test_removal_list(self):
        assert set(SCRUBBED_VARIABLES) == {
            "CARGO_INSTALL_ROOT",
            "CARGO_HOME",
            "CARGO_BUILD_TARGET_DIR",
            "CARGO_TARGET_DIR",
            "BINSTALL_INSTALL_PATH",
            "RUSTUP_HOME",
            "RUSTUP_TOOLCHAIN",
        }
