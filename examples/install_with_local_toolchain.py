"""
Example: Install a package into a throwaway root.

Usage:
    python examples/install_with_local_toolchain.py lustre_dev_tools
"""

import asyncio
import sys
import tempfile
from pathlib import Path

from gleam_pkg import InstallerConfig, PackageInstaller


async def main(name: str):
    root = Path(tempfile.mkdtemp(prefix="gleam_pkgs_"))
    config = InstallerConfig.from_env(root_dir=root)

    installer = PackageInstaller(config)
    unit = await installer.install(name)

    print(f"\n✅ {unit.ref} installed, run it with: {unit.launcher}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "lustre_dev_tools"))
