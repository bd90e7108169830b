"""
Package Models — Values passed between the install pipeline stages.

Defines the resolved package reference, the managed directory layout and the
intermediate results of extraction, build and registration.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from gleam_pkg.errors import DirectoryCreationError

logger = logging.getLogger(__name__)

DOWNLOAD_DIR = "download"
APPS_DIR = "apps"
DB_DIR = "db"


@dataclass(frozen=True)
class PackageRef:
    """A package name with its resolved release version."""

    name: str
    version: str

    @property
    def slug(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def archive_name(self) -> str:
        return f"{self.slug}.tar"

    def __str__(self) -> str:
        return f"{self.name} {self.version}"


@dataclass(frozen=True)
class DirectoryLayout:
    """
    The managed directory tree.

    Layout:
        root/
        ├── download/   raw tarballs and their extracted trees
        ├── apps/       one launcher per installed package
        └── db/         reserved
    """

    root: Path

    @property
    def download(self) -> Path:
        return self.root / DOWNLOAD_DIR

    @property
    def apps(self) -> Path:
        return self.root / APPS_DIR

    @property
    def db(self) -> Path:
        return self.root / DB_DIR

    def ensure(self) -> "DirectoryLayout":
        """Create every managed directory that does not exist yet."""
        for path in (self.root, self.download, self.apps, self.db):
            if path.is_dir():
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryCreationError(f"{path}: {e}") from e
            logger.debug(f"Created {path}")
        return self


@dataclass(frozen=True)
class ArchiveBundle:
    """An unpacked release archive, ready for building."""

    ref: PackageRef
    tarball: Path
    extract_dir: Path

    @property
    def contents_dir(self) -> Path:
        return self.extract_dir / "contents"


@dataclass(frozen=True)
class BuildArtifact:
    """The compiled escript and the runtime release it was built against."""

    executable: Path
    runtime_version: str


@dataclass(frozen=True)
class InstalledUnit:
    """A launcher registered in the apps directory."""

    ref: PackageRef
    launcher: Path
