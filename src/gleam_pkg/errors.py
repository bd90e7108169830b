"""
Error taxonomy for gleam-pkg.

Every kind is terminal for the current install; there are no retry
categories. The message is the only diagnostic shown to the user.
"""


class GleamPkgError(Exception):
    """Base class for all gleam-pkg failures."""


class DirectoryCreationError(GleamPkgError):
    """Home directory cannot be located or a managed directory cannot be created."""


class RegistryError(GleamPkgError):
    """
    Metadata or tarball acquisition failed.

    ``cause`` separates connectivity problems ("network") from local disk
    problems ("disk") and malformed registry documents ("metadata").
    """

    def __init__(self, message: str, cause: str = "network"):
        super().__init__(message)
        self.cause = cause


class ExtractionError(GleamPkgError):
    """The outer or inner release archive could not be unpacked."""


class BuildError(GleamPkgError):
    """A toolchain subprocess exited non-zero or could not be started."""

    def __init__(self, message: str, stderr: str = ""):
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)
        self.stderr = stderr


class InstallError(GleamPkgError):
    """The launcher could not be written to, or removed from, the apps directory."""


class PathError(GleamPkgError):
    """Inspecting PATH or updating the shell profile failed."""
