"""
Installer configuration.

Built once at startup and handed to every pipeline component, so tests can
point the installer at a temporary root, a mock registry and fake toolchain
binaries.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from gleam_pkg import __version__
from gleam_pkg.errors import DirectoryCreationError

ROOT_DIR_NAME = ".gleam_pkgs"
DEFAULT_API_BASE = "https://hex.pm/api/"
DEFAULT_REPOSITORY_BASE = "https://repo.hex.pm/"

# Prints the OTP release ("27") of the local Erlang runtime
OTP_RELEASE_EXPR = 'io:format("~s", [erlang:system_info(otp_release)]), halt().'


def default_root() -> Path:
    """Return ``~/.gleam_pkgs``, failing with DirectoryCreationError without a home."""
    try:
        return Path.home() / ROOT_DIR_NAME
    except RuntimeError as e:
        raise DirectoryCreationError(f"Unable to locate home directory: {e}") from e


@dataclass(frozen=True)
class InstallerConfig:
    """Endpoints, paths and external commands used by one installer run."""

    root_dir: Path
    api_base: str = DEFAULT_API_BASE
    repository_base: str = DEFAULT_REPOSITORY_BASE
    user_agent: str = f"gleam-pkg/{__version__}"
    gleam_command: str = "gleam"
    runtime_version_command: tuple[str, ...] = field(
        default=("erl", "-noshell", "-eval", OTP_RELEASE_EXPR)
    )

    @classmethod
    def from_env(cls, root_dir: Path | None = None) -> "InstallerConfig":
        """
        Build a config from GLEAM_PKG_* environment variables.

        Args:
            root_dir: Explicit root; wins over GLEAM_PKG_ROOT and the default.
        """
        env_root = os.environ.get("GLEAM_PKG_ROOT")
        if root_dir is None:
            root_dir = Path(env_root) if env_root else default_root()

        config = cls(root_dir=Path(root_dir).expanduser())
        overrides = {}
        if api_base := os.environ.get("GLEAM_PKG_API_BASE"):
            overrides["api_base"] = _with_slash(api_base)
        if repository_base := os.environ.get("GLEAM_PKG_REPOSITORY_BASE"):
            overrides["repository_base"] = _with_slash(repository_base)
        if gleam := os.environ.get("GLEAM_PKG_GLEAM"):
            overrides["gleam_command"] = gleam
        if erl := os.environ.get("GLEAM_PKG_ERL"):
            overrides["runtime_version_command"] = (erl, *config.runtime_version_command[1:])
        return replace(config, **overrides) if overrides else config


def _with_slash(url: str) -> str:
    # URLs are joined by concatenation
    return url if url.endswith("/") else url + "/"
