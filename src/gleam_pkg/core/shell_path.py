"""
PATH inspection helpers.

Pure queries: whether the apps directory is on PATH and which profile file
belongs to the user's shell. Prompting and editing the profile is left to
the CLI.
"""

import os
from pathlib import Path

from gleam_pkg.errors import PathError

SHELL_PROFILES = {
    "bash": ".bashrc",
    "zsh": ".zshrc",
}


def apps_dir_on_path(apps_dir: Path, path_value: str | None) -> bool:
    """
    Check whether ``apps_dir`` is one of the entries of a PATH value.

    Args:
        apps_dir: The managed apps directory.
        path_value: Contents of the PATH variable, or None if it is unset.
    """
    if path_value is None:
        raise PathError("PATH environment variable is not set")

    target = os.path.normpath(apps_dir.expanduser())
    for entry in path_value.split(os.pathsep):
        if entry and os.path.normpath(os.path.expanduser(entry)) == target:
            return True
    return False


def profile_for_shell(shell: str | None, home: Path) -> Path:
    """
    Return the profile file for a login shell.

    Args:
        shell: Value of SHELL, e.g. '/usr/bin/zsh'.
        home: The user's home directory.
    """
    if not shell:
        raise PathError("SHELL environment variable is not set")

    name = Path(shell).name
    profile = SHELL_PROFILES.get(name)
    if profile is None:
        raise PathError(f"Unsupported shell: {name}. Add the apps directory to PATH manually.")
    return home / profile


def export_line(apps_dir: Path) -> str:
    """The profile line that puts ``apps_dir`` in front of PATH."""
    return f'export PATH="{apps_dir}:$PATH"'
