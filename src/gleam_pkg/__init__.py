"""
gleam-pkg - installer for Gleam command-line programs.

Resolves the latest release of a package on Hex, builds it with the gleam
toolchain and registers a self-contained launcher under ~/.gleam_pkgs/apps.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "PackageInstaller":
        from gleam_pkg.core.installer import PackageInstaller

        return PackageInstaller
    if name == "InstallerConfig":
        from gleam_pkg.config import InstallerConfig

        return InstallerConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PackageInstaller", "InstallerConfig", "__version__"]
