"""
Install Registrar — places launchers into the managed apps directory.
"""

import logging
import shutil
import stat
from pathlib import Path

from gleam_pkg.errors import InstallError
from gleam_pkg.models.package import InstalledUnit, PackageRef

logger = logging.getLogger(__name__)

# rwxr-xr-x
LAUNCHER_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


class InstallRegistrar:
    """
    Owns ``apps/``: one launcher per package name.

    Output structure:
        apps/
        ├── demo
        └── other_tool
    """

    def __init__(self, apps_dir: Path):
        self.apps_dir = apps_dir

    def launcher_path(self, name: str) -> Path:
        return self.apps_dir / name

    def clear(self, ref: PackageRef) -> None:
        """Remove any launcher for ``ref.name`` and any ``{name}-{version}`` directory."""
        launcher = self.launcher_path(ref.name)
        versioned = self.apps_dir / ref.slug
        try:
            if launcher.is_file() or launcher.is_symlink():
                launcher.unlink()
                logger.info(f"Removed previous launcher {launcher}")
            if versioned.is_dir():
                shutil.rmtree(versioned)
                logger.info(f"Removed previous install {versioned}")
        except OSError as e:
            raise InstallError(f"Failed to remove previous install of {ref.name}: {e}") from e

    def register(self, ref: PackageRef, launcher_text: str) -> InstalledUnit:
        """Write the launcher for ``ref`` and make it executable."""
        launcher = self.launcher_path(ref.name)
        try:
            launcher.write_text(launcher_text)
            launcher.chmod(LAUNCHER_MODE)
        except OSError as e:
            raise InstallError(f"Failed to write launcher {launcher}: {e}") from e

        logger.info(f"Installed {ref} to {launcher}")
        return InstalledUnit(ref=ref, launcher=launcher)

    def list_installed(self) -> list[str]:
        """Names of the launchers currently in the apps directory."""
        if not self.apps_dir.is_dir():
            return []
        return sorted(p.name for p in self.apps_dir.iterdir() if p.is_file())
