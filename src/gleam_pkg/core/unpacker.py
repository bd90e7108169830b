"""
Hex Release Archive Unpacker.

A Hex release tarball is an uncompressed tar holding VERSION, CHECKSUM,
metadata.config and contents.tar.gz; the package sources live in the inner
gzip-compressed tar. Both layers are peeled in order into
``download/{name}-{version}/``.
"""

import gzip
import io
import logging
import shutil
import tarfile
import zlib
from pathlib import Path

from gleam_pkg.errors import ExtractionError
from gleam_pkg.models.package import ArchiveBundle, PackageRef

logger = logging.getLogger(__name__)

INNER_ARCHIVE = "contents.tar.gz"


class ArchiveUnpacker:
    """Unpacks release tarballs under the download directory."""

    def __init__(self, download_dir: Path):
        self.download_dir = download_dir

    def unpack(self, ref: PackageRef, tarball: Path) -> ArchiveBundle:
        """
        Extract ``tarball`` and its inner sources.

        Any previous extraction of the same release is removed first, so the
        result never mixes files from an earlier attempt.

        Args:
            ref: The release being installed.
            tarball: Path of the downloaded outer tar.

        Returns:
            ArchiveBundle whose ``contents_dir`` holds the package sources.
        """
        bundle = ArchiveBundle(ref=ref, tarball=tarball, extract_dir=self.download_dir / ref.slug)

        self._clean_slate(bundle.extract_dir)
        self._extract(tarball, bundle.extract_dir, "release archive")

        inner = bundle.extract_dir / INNER_ARCHIVE
        if not inner.is_file():
            raise ExtractionError(f"{INNER_ARCHIVE} not found in release archive {tarball}")
        self._extract(self._decompress(inner), bundle.contents_dir, INNER_ARCHIVE)

        logger.info(f"Extracted {ref} to {bundle.contents_dir}")
        return bundle

    def _clean_slate(self, extract_dir: Path) -> None:
        try:
            if extract_dir.exists():
                logger.debug(f"Removing previous extraction {extract_dir}")
                shutil.rmtree(extract_dir)
            extract_dir.mkdir(parents=True)
        except OSError as e:
            raise ExtractionError(f"Failed to prepare {extract_dir}: {e}") from e

    def _decompress(self, archive: Path) -> io.BytesIO:
        """Gunzip the whole inner archive so the gzip CRC trailer is verified."""
        try:
            return io.BytesIO(gzip.decompress(archive.read_bytes()))
        except (OSError, EOFError, zlib.error) as e:
            raise ExtractionError(f"Failed to decompress {INNER_ARCHIVE} {archive}: {e}") from e

    def _extract(self, archive: Path | io.BytesIO, dest: Path, label: str) -> None:
        try:
            dest.mkdir(parents=True, exist_ok=True)
            if isinstance(archive, Path):
                tar = tarfile.open(archive, "r:")
            else:
                tar = tarfile.open(fileobj=archive, mode="r:")
            with tar:
                tar.extractall(dest, filter="data")
        except (tarfile.TarError, OSError, EOFError) as e:
            raise ExtractionError(f"Failed to unpack {label}: {e}") from e
