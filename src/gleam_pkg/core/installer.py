"""
Package Installer — The acquisition-and-deployment pipeline.

Runs the stages strictly in order:

    Registry -> Unpacker -> Builder -> Packager -> Registrar

Any stage failure aborts the install. Nothing is rolled back: a failed build
leaves the extracted sources for inspection, and a failed packaging step
leaves the package uninstalled.
"""

import logging

import httpx
from rich.console import Console

from gleam_pkg.config import InstallerConfig
from gleam_pkg.core.builder import BuildOrchestrator
from gleam_pkg.core.packager import LauncherPackager
from gleam_pkg.core.registrar import InstallRegistrar
from gleam_pkg.core.registry import RegistryClient
from gleam_pkg.core.unpacker import ArchiveUnpacker
from gleam_pkg.models.package import DirectoryLayout, InstalledUnit

logger = logging.getLogger("PackageInstaller")


class PackageInstaller:
    """
    Installs a single Gleam CLI package from Hex.

    Example:
        installer = PackageInstaller(InstallerConfig.from_env())
        unit = asyncio.run(installer.install("demo"))
    """

    def __init__(
        self,
        config: InstallerConfig,
        console: Console | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.layout = DirectoryLayout(config.root_dir)
        self.console = console or Console(stderr=True)
        self.transport = transport

        self.unpacker = ArchiveUnpacker(self.layout.download)
        self.builder = BuildOrchestrator(config)
        self.packager = LauncherPackager(config)
        self.registrar = InstallRegistrar(self.layout.apps)

    async def install(self, name: str) -> InstalledUnit:
        """
        Install the latest release of ``name``.

        Args:
            name: Package name on Hex.

        Returns:
            The registered launcher.
        """
        self.layout.ensure()

        # --- 1. RESOLVE & DOWNLOAD ---
        async with RegistryClient(self.config, self.layout.download, self.transport) as registry:
            with self.console.status(f"[bold cyan]Resolving {name}...[/bold cyan]"):
                ref = await registry.resolve(name)
            self.console.print(f"Resolved [bold]{ref.name}[/bold] to version {ref.version}")

            with self.console.status(f"[bold cyan]Downloading {ref}...[/bold cyan]"):
                tarball = await registry.download(ref)

        # --- 2. UNPACK ---
        bundle = self.unpacker.unpack(ref, tarball)

        # --- 3. BUILD ---
        # Toolchain output streams straight to the terminal, so no spinner here
        self.console.print(f"[cyan]Building {ref} in {bundle.contents_dir}[/cyan]")
        artifact = await self.builder.build(bundle)

        # --- 4. PACKAGE & REGISTER ---
        self.registrar.clear(ref)
        launcher = self.packager.package(ref, artifact)
        unit = self.registrar.register(ref, launcher)

        self.console.print(f"[bold green]Installed {ref} to {unit.launcher}[/bold green]")
        logger.info(f"Install of {ref} complete")
        return unit
