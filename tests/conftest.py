"""Shared fixtures: release tarballs, a mock Hex registry and a fake toolchain."""

import io
import json
import stat
import tarfile
from pathlib import Path

import httpx
import pytest

from gleam_pkg.config import InstallerConfig

API_BASE = "https://hex.test/api/"
REPOSITORY_BASE = "https://repo.hex.test/"

GLEAM_TOML = b'name = "demo"\nversion = "1.2.0"\ntarget = "erlang"\n'
DEMO_SOURCE = b'import gleam/io\n\npub fn main() {\n  io.println("demo")\n}\n'


def _tar_bytes(files: dict[str, bytes], mode: str) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def make_release_tarball(sources: dict[str, bytes] | None = None) -> bytes:
    """Build a Hex-style release: an outer tar wrapping contents.tar.gz."""
    if sources is None:
        sources = {"gleam.toml": GLEAM_TOML, "src/demo.gleam": DEMO_SOURCE}
    return _tar_bytes(
        {
            "VERSION": b"3",
            "CHECKSUM": b"0" * 64,
            "metadata.config": b'{<<"name">>,<<"demo">>}.\n',
            "contents.tar.gz": _tar_bytes(sources, "w:gz"),
        },
        "w:",
    )


class FakeHex:
    """Routes for a mock Hex API and repository; records every request."""

    def __init__(self, metadata=None, tarball: bytes | None = None):
        self.metadata = metadata if metadata is not None else {"releases": [{"version": "1.2.0"}]}
        self.tarball = make_release_tarball() if tarball is None else tarball
        self.metadata_status = 200
        self.tarball_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/api/packages/"):
            if isinstance(self.metadata, (bytes, str)):
                return httpx.Response(self.metadata_status, content=self.metadata)
            return httpx.Response(self.metadata_status, json=self.metadata)
        if path.startswith("/tarballs/"):
            return httpx.Response(self.tarball_status, content=self.tarball)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def tarball_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/tarballs/")]


FAKE_GLEAM = """\
#!/bin/sh
echo "$*" >> "__LOG__"
case "$1" in
  build)
    if [ "__BUILD_EXIT__" != "0" ]; then
      echo "error: Unknown variable" >&2
      exit __BUILD_EXIT__
    fi
    echo "Compiled in 0.01s"
    ;;
  add)
    ;;
  run)
    for arg in "$@"; do
      case "$arg" in
        --out=*) out="${arg#--out=}" ;;
      esac
    done
    mkdir -p "$out"
    cat > "$out/demo" <<'ESCRIPT'
#!/bin/sh
echo "demo called with: $*"
ESCRIPT
    chmod +x "$out/demo"
    ;;
esac
"""


def _write_script(path: Path, text: str) -> Path:
    path.write_text(text)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeToolchain:
    """Shell-script stand-ins for ``gleam`` and ``erl``."""

    def __init__(self, bin_dir: Path):
        self.bin_dir = bin_dir
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        self.log = bin_dir / "gleam_calls.log"
        self.gleam = bin_dir / "gleam"
        self.erl = bin_dir / "erl"
        self.set_build_exit(0)
        self.set_otp_release("27")

    def set_build_exit(self, code: int) -> None:
        script = FAKE_GLEAM.replace("__LOG__", str(self.log)).replace("__BUILD_EXIT__", str(code))
        _write_script(self.gleam, script)

    def set_otp_release(self, release: str) -> None:
        _write_script(self.erl, f"#!/bin/sh\nprintf '%s' '{release}'\n")

    @property
    def calls(self) -> list[str]:
        if not self.log.exists():
            return []
        return self.log.read_text().splitlines()


@pytest.fixture
def fake_hex():
    return FakeHex()


@pytest.fixture
def toolchain(tmp_path):
    return FakeToolchain(tmp_path / "bin")


@pytest.fixture
def config(tmp_path, toolchain):
    return InstallerConfig(
        root_dir=tmp_path / "gleam_pkgs",
        api_base=API_BASE,
        repository_base=REPOSITORY_BASE,
        gleam_command=str(toolchain.gleam),
        runtime_version_command=(str(toolchain.erl), "-noshell", "-eval", "halt()."),
    )


def metadata_json(*versions: str) -> bytes:
    return json.dumps({"releases": [{"version": v} for v in versions]}).encode()
