"""
Launcher Packager.

Embeds a compiled escript into a POSIX sh launcher. Escripts only run on an
Erlang runtime compatible with the one they were built with, so the launcher
records the build-time OTP release and refuses to start under another one.
"""

import base64
import logging
import shlex

from gleam_pkg.config import InstallerConfig
from gleam_pkg.errors import BuildError
from gleam_pkg.models.package import BuildArtifact, PackageRef

logger = logging.getLogger(__name__)

PAYLOAD_MARKER = "GLEAM_PKG_PAYLOAD"

LAUNCHER_TEMPLATE = """\
#!/bin/sh
# {ref} - installed by gleam-pkg
COMPILED_VERSION={compiled_version}
CURRENT_VERSION="$({version_command} 2>/dev/null)"
if [ "$CURRENT_VERSION" != "$COMPILED_VERSION" ]; then
    echo "{name}: built for Erlang/OTP $COMPILED_VERSION but the current runtime is ${{CURRENT_VERSION:-unavailable}}; reinstall with gleam-pkg install {name}" >&2
    exit 1
fi
TMPFILE="$(mktemp "${{TMPDIR:-/tmp}}/{name}.XXXXXX")" || exit 1
base64 -d > "$TMPFILE" <<'{marker}'
{payload}{marker}
chmod +x "$TMPFILE"
"$TMPFILE" "$@"
STATUS=$?
rm -f "$TMPFILE"
exit $STATUS
"""


class LauncherPackager:
    """Renders self-contained launcher scripts from build artifacts."""

    def __init__(self, config: InstallerConfig):
        self.config = config

    def package(self, ref: PackageRef, artifact: BuildArtifact) -> str:
        """
        Render the launcher for ``ref``.

        Args:
            ref: The release being installed.
            artifact: The escript and the runtime version it was built against.

        Returns:
            Launcher script text with the escript embedded as base64.
        """
        try:
            blob = artifact.executable.read_bytes()
        except OSError as e:
            raise BuildError(f"Failed to read build artifact {artifact.executable}: {e}") from e

        logger.debug(f"Embedding {len(blob)} bytes from {artifact.executable}")
        return LAUNCHER_TEMPLATE.format(
            ref=ref,
            name=ref.name,
            compiled_version=shlex.quote(artifact.runtime_version),
            version_command=shlex.join(self.config.runtime_version_command),
            marker=PAYLOAD_MARKER,
            payload=base64.encodebytes(blob).decode("ascii"),
        )


def extract_payload(launcher: str) -> bytes:
    """Decode the escript embedded in a launcher rendered by LauncherPackager."""
    start = launcher.index(f"<<'{PAYLOAD_MARKER}'\n") + len(PAYLOAD_MARKER) + 5
    end = launcher.index(f"{PAYLOAD_MARKER}\n", start)
    return base64.decodebytes(launcher[start:end].encode("ascii"))
