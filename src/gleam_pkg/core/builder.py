"""
Gleam Build Orchestrator.

Runs the gleam toolchain inside the unpacked sources:

    gleam build
    gleam add gleescript
    gleam run -m gleescript -- --out=build/gleescript

and queries the local Erlang runtime for the OTP release the escript was
built against. Each step runs once; the first failure aborts the install.
"""

import asyncio
import codecs
import logging
import sys
from pathlib import Path

from gleam_pkg.config import InstallerConfig
from gleam_pkg.errors import BuildError
from gleam_pkg.models.package import ArchiveBundle, BuildArtifact

logger = logging.getLogger(__name__)

BUNDLER_PLUGIN = "gleescript"
BUNDLE_OUT_DIR = Path("build") / "gleescript"
STDERR_CHUNK = 4096


class BuildOrchestrator:
    """Drives the external toolchain for one unpacked package."""

    def __init__(self, config: InstallerConfig):
        self.config = config

    async def build(self, bundle: ArchiveBundle) -> BuildArtifact:
        """
        Compile the package and bundle it into a single escript.

        Args:
            bundle: Extracted release whose ``contents_dir`` holds gleam.toml.

        Returns:
            BuildArtifact pointing at the escript and stamped with the runtime version.
        """
        cwd = bundle.contents_dir
        gleam = self.config.gleam_command

        await self._run([gleam, "build"], cwd, "build")
        await self._run([gleam, "add", BUNDLER_PLUGIN], cwd, f"add {BUNDLER_PLUGIN}")
        await self._run(
            [gleam, "run", "-m", BUNDLER_PLUGIN, "--", f"--out={BUNDLE_OUT_DIR}"],
            cwd,
            f"run {BUNDLER_PLUGIN}",
        )

        executable = cwd / BUNDLE_OUT_DIR / bundle.ref.name
        if not executable.is_file():
            raise BuildError(f"{BUNDLER_PLUGIN} did not produce {executable}")

        runtime_version = await self.query_runtime_version()
        logger.info(f"Built {bundle.ref} against OTP {runtime_version}")
        return BuildArtifact(executable=executable, runtime_version=runtime_version)

    async def query_runtime_version(self) -> str:
        """Return the release string printed by the runtime version command."""
        cmd = list(self.config.runtime_version_command)
        proc = await self._spawn(cmd, None, stdout=asyncio.subprocess.PIPE)
        stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            raise BuildError(
                f"Runtime version query failed with exit code {proc.returncode}",
                stderr=stderr.decode(errors="replace"),
            )
        version = stdout.decode(errors="replace").strip()
        if not version:
            raise BuildError("Runtime version query printed nothing")
        return version

    # ──────────────────────────────────────────────
    # Subprocess Layer
    # ──────────────────────────────────────────────

    async def _spawn(self, cmd: list[str], cwd: Path | None, stdout=None):
        logger.debug(f"Running {' '.join(cmd)} (cwd={cwd})")
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BuildError(f"Failed to start program {cmd[0]}: {e}") from e

    async def _run(self, cmd: list[str], cwd: Path, step: str) -> None:
        """Run ``cmd`` with stdout inherited and stderr echoed live and captured."""
        proc = await self._spawn(cmd, cwd)

        captured: list[str] = []
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            # Chunked reads: toolchain lines may exceed the StreamReader line limit
            while chunk := await proc.stderr.read(STDERR_CHUNK):
                text = decoder.decode(chunk)
                captured.append(text)
                sys.stderr.write(text)
                sys.stderr.flush()
            captured.append(decoder.decode(b"", final=True))
        finally:
            returncode = await proc.wait()

        if returncode != 0:
            raise BuildError(
                f"gleam {step} failed with exit code {returncode}",
                stderr="".join(captured),
            )
