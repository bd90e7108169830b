"""
Hex Registry Client.

Resolves package metadata from the Hex API and downloads release tarballs
from the Hex repository. Requests are issued once: no retries, no timeout.
"""

import logging
from pathlib import Path

import aiofiles
import httpx

from gleam_pkg.config import InstallerConfig
from gleam_pkg.errors import RegistryError
from gleam_pkg.models.package import PackageRef

logger = logging.getLogger(__name__)


def select_version(metadata: dict) -> str:
    """
    Pick the release to install from registry metadata.

    The first entry of ``releases`` is the selected release; versions are
    never compared or sorted.

    Args:
        metadata: Decoded package document from the Hex API.

    Returns:
        The version string of ``releases[0]``.
    """
    releases = metadata.get("releases")
    if not isinstance(releases, list) or not releases:
        raise RegistryError("No releases found in metadata", cause="metadata")

    first = releases[0]
    version = first.get("version") if isinstance(first, dict) else None
    if not isinstance(version, str) or not version:
        raise RegistryError("No version found in metadata", cause="metadata")
    return version


class RegistryClient:
    """
    Async client for the Hex API and repository.

    Use as an async context manager so the underlying connection pool is
    closed once the install finishes:

        async with RegistryClient(config) as registry:
            ref = await registry.resolve("demo")
    """

    def __init__(
        self,
        config: InstallerConfig,
        download_dir: Path,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.download_dir = download_dir
        self._client = httpx.AsyncClient(
            headers={"user-agent": config.user_agent},
            timeout=httpx.Timeout(None),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────
    # HTTP Layer
    # ──────────────────────────────────────────────

    async def _get(self, url: str, accept: str, what: str) -> httpx.Response:
        """GET ``url`` and require a 2xx status."""
        try:
            resp = await self._client.get(url, headers={"accept": accept})
        except httpx.HTTPError as e:
            raise RegistryError(f"Failed to fetch {what}: {e}") from e

        if not resp.is_success:
            raise RegistryError(
                f"Received non-success status code {resp.status_code} for {what} ({url})"
            )
        return resp

    # ──────────────────────────────────────────────
    # Metadata
    # ──────────────────────────────────────────────

    async def resolve_metadata(self, name: str) -> dict:
        """Fetch the package document from ``{api_base}packages/{name}``."""
        url = f"{self.config.api_base}packages/{name}"
        logger.info(f"Inspecting package from: {url}")

        resp = await self._get(url, "application/json", f"metadata for package {name}")
        try:
            metadata = resp.json()
        except ValueError as e:
            raise RegistryError(
                f"Returned metadata is not valid JSON: {name}, {e}", cause="metadata"
            ) from e

        if not isinstance(metadata, dict):
            raise RegistryError(
                f"Returned metadata for {name} is not a JSON object", cause="metadata"
            )
        return metadata

    async def resolve(self, name: str) -> PackageRef:
        """Resolve ``name`` to its latest published release."""
        metadata = await self.resolve_metadata(name)
        version = select_version(metadata)
        logger.debug(f"Selected {name} {version}")
        return PackageRef(name=name, version=version)

    # ──────────────────────────────────────────────
    # Tarballs
    # ──────────────────────────────────────────────

    async def fetch_archive(self, ref: PackageRef) -> bytes:
        """Download the release tarball for ``ref``."""
        url = f"{self.config.repository_base}tarballs/{ref.archive_name}"
        logger.info(f"Downloading package from: {url}")

        resp = await self._get(url, "application/x-tar", f"tarball for {ref}")
        if not resp.content:
            raise RegistryError(f"Received an empty tarball for {ref}")
        return resp.content

    async def save_archive(self, ref: PackageRef, data: bytes) -> Path:
        """Persist tarball bytes to ``download/{name}-{version}.tar``."""
        tarball_path = self.download_dir / ref.archive_name
        try:
            async with aiofiles.open(tarball_path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise RegistryError(
                f"Failed to save tarball to disk: {tarball_path}, {e}", cause="disk"
            ) from e

        logger.info(f"Tarball saved to: {tarball_path}")
        return tarball_path

    async def download(self, ref: PackageRef) -> Path:
        """Fetch and persist the tarball for ``ref``."""
        data = await self.fetch_archive(ref)
        return await self.save_archive(ref, data)
