"""
gleam-pkg CLI — Install Gleam command-line programs from Hex.

Usage:
    gleam-pkg install lustre_dev_tools
    gleam-pkg install demo --root /tmp/pkgs --no-path
    gleam-pkg list
    gleam-pkg path
"""

import asyncio
import logging
import os
from pathlib import Path

import click
from rich.console import Console

from gleam_pkg.errors import GleamPkgError, PathError

console = Console()

root_option = click.option(
    "--root",
    "-r",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root of the managed directory tree (default: ~/.gleam_pkgs).",
)


def _load_config(root: Path | None):
    from gleam_pkg.config import InstallerConfig

    try:
        return InstallerConfig.from_env(root_dir=root)
    except GleamPkgError as e:
        raise click.ClickException(str(e)) from e


def _append_to_profile(profile: Path, line: str) -> None:
    """Append ``line`` to a shell profile unless it is already there."""
    try:
        existing = profile.read_text() if profile.exists() else ""
        if line in existing.splitlines():
            return
        with open(profile, "a") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(f"\n# Added by gleam-pkg\n{line}\n")
    except OSError as e:
        raise PathError(f"Failed to update {profile}: {e}") from e


def _offer_path_registration(apps_dir: Path, assume_yes: bool | None) -> None:
    """Ask to add ``apps_dir`` to the shell profile when it is not on PATH."""
    from gleam_pkg.core.shell_path import apps_dir_on_path, export_line, profile_for_shell

    if apps_dir_on_path(apps_dir, os.environ.get("PATH")):
        return

    try:
        home = Path.home()
    except RuntimeError as e:
        raise PathError(f"Unable to locate home directory: {e}") from e
    profile = profile_for_shell(os.environ.get("SHELL"), home)
    line = export_line(apps_dir)
    if assume_yes is None:
        assume_yes = click.confirm(f"{apps_dir} is not on your PATH. Add it to {profile}?", default=True)
    if not assume_yes:
        console.print(f"Skipped. Add this line to your shell profile:\n  {line}")
        return

    _append_to_profile(profile, line)
    console.print(f"[green]Updated {profile}. Restart your shell to use installed programs.[/green]")


@click.group()
@click.version_option(package_name="gleam-pkg")
def cli():
    """gleam-pkg — Gleam package manager for installing Gleam CLI programs."""
    pass


@cli.command()
@click.argument("package")
@root_option
@click.option(
    "--path/--no-path",
    "register_path",
    default=None,
    help="Add the apps directory to the shell profile without asking (or never).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def install(package, root, register_path, verbose):
    """Install the latest release of PACKAGE."""
    from gleam_pkg.core.installer import PackageInstaller

    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = _load_config(root)
    installer = PackageInstaller(config)
    try:
        asyncio.run(installer.install(package))
    except GleamPkgError as e:
        raise click.ClickException(str(e)) from e

    try:
        _offer_path_registration(installer.layout.apps, register_path)
    except PathError as e:
        console.print(f"[yellow]Error inspecting PATH environment variable: {e}[/yellow]")


@cli.command(name="list")
@root_option
def list_installed(root):
    """List installed programs."""
    from gleam_pkg.core.registrar import InstallRegistrar
    from gleam_pkg.models.package import DirectoryLayout

    layout = DirectoryLayout(_load_config(root).root_dir)
    names = InstallRegistrar(layout.apps).list_installed()
    if not names:
        console.print("No packages installed.")
        return
    for name in names:
        click.echo(name)


@cli.command()
@root_option
def path(root):
    """Print the apps directory and whether it is on PATH."""
    from gleam_pkg.core.shell_path import apps_dir_on_path
    from gleam_pkg.models.package import DirectoryLayout

    apps_dir = DirectoryLayout(_load_config(root).root_dir).apps
    click.echo(str(apps_dir))
    try:
        on_path = apps_dir_on_path(apps_dir, os.environ.get("PATH"))
    except PathError as e:
        raise click.ClickException(str(e)) from e
    if not on_path:
        console.print("[yellow]Not on PATH.[/yellow]")


if __name__ == "__main__":
    cli()
