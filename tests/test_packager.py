"""Tests for the embedded-escript launcher."""

import os
import subprocess

import pytest

from gleam_pkg.core.packager import LauncherPackager, extract_payload
from gleam_pkg.errors import BuildError
from gleam_pkg.models.package import BuildArtifact, PackageRef

REF = PackageRef("demo", "1.2.0")

ESCRIPT = b"#!/bin/sh\necho \"demo called with: $*\"\nexit 3\n"


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "demo"
    path.write_bytes(ESCRIPT)
    return BuildArtifact(executable=path, runtime_version="27")


def _run(launcher_path, *args, tmpdir):
    env = dict(os.environ, TMPDIR=str(tmpdir))
    return subprocess.run(
        [str(launcher_path), *args], capture_output=True, text=True, env=env
    )


class TestRender:
    def test_records_compiled_version(self, config, artifact):
        launcher = LauncherPackager(config).package(REF, artifact)
        assert launcher.startswith("#!/bin/sh\n")
        assert "COMPILED_VERSION=27\n" in launcher
        assert "demo 1.2.0" in launcher

    def test_payload_round_trip(self, config, tmp_path):
        blob = bytes(range(256)) * 50
        exe = tmp_path / "binary"
        exe.write_bytes(blob)
        launcher = LauncherPackager(config).package(REF, BuildArtifact(exe, "27"))
        assert extract_payload(launcher) == blob

    def test_missing_artifact(self, config, tmp_path):
        with pytest.raises(BuildError, match="Failed to read build artifact"):
            LauncherPackager(config).package(REF, BuildArtifact(tmp_path / "gone", "27"))


class TestLauncherExecution:
    @pytest.fixture
    def launcher_path(self, config, artifact, tmp_path):
        path = tmp_path / "launcher"
        path.write_text(LauncherPackager(config).package(REF, artifact))
        path.chmod(0o755)
        return path

    def test_forwards_arguments_and_status(self, launcher_path, tmp_path):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        result = _run(launcher_path, "--help", "x y", tmpdir=scratch)

        assert result.stdout == "demo called with: --help x y\n"
        assert result.returncode == 3
        # Temp copy of the escript is removed even on non-zero exit
        assert list(scratch.iterdir()) == []

    def test_runtime_mismatch_aborts(self, launcher_path, toolchain, tmp_path):
        toolchain.set_otp_release("26")
        result = _run(launcher_path, "--help", tmpdir=tmp_path)

        assert result.returncode == 1
        assert "built for Erlang/OTP 27" in result.stderr
        assert "current runtime is 26" in result.stderr
        assert "demo called with" not in result.stdout
