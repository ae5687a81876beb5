"""shellcheck integration: locate or download shellcheck and run it.

The binary is taken from PATH when present. Otherwise a pinned release is
downloaded from GitHub once with pooch, checked against its SHA-256, and
cached under ``$EXECJAR_SHELLCHECK_CACHE_DIR`` (default
``~/.cache/execjar/shellcheck``).

Scripts are checked as POSIX sh with gcc-style output, one finding per line:

    /tmp/shellcheck-x.sh:12:5: warning: foo is referenced but not assigned. [SC2154]
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import stat
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import httpx
import pooch

from pants_execjar._exceptions import ShellCheckUnavailableError

logger = logging.getLogger(__name__)

SHELLCHECK_VERSION = "v0.10.0"
CACHE_DIR_ENV_VAR = "EXECJAR_SHELLCHECK_CACHE_DIR"
SHA256_ENV_VAR = "EXECJAR_SHELLCHECK_SHA256"
DOWNLOAD_URL_TEMPLATE = (
    "https://github.com/koalaman/shellcheck/releases/download/"
    "{version}/shellcheck-{version}.{os}.{arch}.tar.xz"
)
DOWNLOAD_TIMEOUT_SECONDS = 60.0

# SHA-256 of release archives, keyed by (version, os, arch). Platforms
# without an entry need shellcheck on PATH or $EXECJAR_SHELLCHECK_SHA256.
PINNED_SHA256: dict[tuple[str, str, str], str] = {
    ("v0.10.0", "linux", "x86_64"): (
        "6c881ab0698e4e6ea235245f22832860544f17ba386442fe7e9d629f8cbedf87"
    ),
    ("v0.10.0", "linux", "aarch64"): (
        "324a7e89de8fa2aed0d0c28f3dab59cf84c6d74264022c00c22af665ed1a09bb"
    ),
}

_EXTRACT_DIR = "extracted"

@dataclass(frozen=True)
class ShellCheckResult:
    """Result of a shellcheck run."""

    success: bool
    exit_code: int
    output: tuple[str, ...] = ()

    @property
    def output_text(self) -> str:
        return "\n".join(self.output)

    @property
    def has_warnings(self) -> bool:
        return any("warning:" in line or "note:" in line for line in self.output)

    @property
    def has_errors(self) -> bool:
        return any("error:" in line for line in self.output)

    def __str__(self) -> str:
        return (
            f"ShellCheckResult(success={self.success}, exit_code={self.exit_code}, "
            f"output={len(self.output)} lines)"
        )


def default_cache_dir() -> Path:
    configured = os.environ.get(CACHE_DIR_ENV_VAR)
    if configured:
        return Path(configured)
    return Path.home() / ".cache" / "execjar" / "shellcheck"


def detect_platform() -> tuple[str, str]:
    """Return the (os, arch) pair used in shellcheck release asset names."""
    system = platform.system().lower()
    if system == "darwin":
        os_name = "darwin"
    elif system == "linux":
        os_name = "linux"
    else:
        raise ShellCheckUnavailableError(f"Unsupported OS for shellcheck download: {system}")

    machine = platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        arch = "x86_64"
    elif machine in ("aarch64", "arm64"):
        arch = "aarch64"
    else:
        raise ShellCheckUnavailableError(
            f"Unsupported architecture for shellcheck download: {machine}"
        )
    return os_name, arch


def download_url(version: str, os_name: str, arch: str) -> str:
    """Build the GitHub release download URL for a platform archive.

    Example: download_url("v0.10.0", "linux", "x86_64")
             -> ".../v0.10.0/shellcheck-v0.10.0.linux.x86_64.tar.xz"
    """
    return DOWNLOAD_URL_TEMPLATE.format(version=version, os=os_name, arch=arch)


class HTTPXDownloader:
    """pooch downloader that streams with httpx into a temporary file.

    The temporary file replaces ``output_file`` once the transfer completes.
    """

    def __init__(self, timeout: float = DOWNLOAD_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout

    def __call__(
        self,
        url: str,
        output_file: str,
        pooch_obj: Optional[pooch.Pooch],
        check_only: bool = False,
        **_: Any,
    ) -> Optional[bool]:
        timeout = httpx.Timeout(self.timeout)
        output_path = Path(output_file)
        tmp_path = output_path.with_name(f"{output_path.name}.part")
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                if check_only:
                    response = client.head(url)
                    return response.is_success
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with tmp_path.open("wb") as fh:
                        for chunk in response.iter_bytes(chunk_size=1024 * 64):
                            fh.write(chunk)
            os.replace(tmp_path, output_path)
        finally:
            tmp_path.unlink(missing_ok=True)
        return None


class ShellCheck:
    """Runs shellcheck, downloading and caching it on first use.

    ``sha256`` overrides the pinned archive checksum; it defaults to
    ``$EXECJAR_SHELLCHECK_SHA256``.
    """

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        *,
        version: str = SHELLCHECK_VERSION,
        allow_download: bool = True,
        sha256: Optional[str] = None,
    ) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        self.version = version
        self.allow_download = allow_download
        self.sha256 = sha256 or os.environ.get(SHA256_ENV_VAR) or None
        self._binary: Optional[str] = None

    @property
    def cached_binary_path(self) -> Path:
        return (
            self.cache_dir
            / self.version
            / _EXTRACT_DIR
            / f"shellcheck-{self.version}"
            / "shellcheck"
        )

    def is_available(self) -> bool:
        """True if shellcheck is on PATH, cached, or could be downloaded."""
        try:
            self._ensure_binary()
        except (ShellCheckUnavailableError, OSError, ValueError, httpx.HTTPError) as e:
            # pooch raises ValueError on a checksum mismatch.
            logger.debug("shellcheck unavailable: %s", e)
            return False
        return True

    def validate(self, script_content: str) -> ShellCheckResult:
        """Check script text by writing it to a temporary file."""
        binary = self._ensure_binary()
        fd, tmp_name = tempfile.mkstemp(prefix="shellcheck-", suffix=".sh")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(script_content)
            return self._run(binary, Path(tmp_name))
        finally:
            Path(tmp_name).unlink(missing_ok=True)

    def validate_file(self, script_file: Union[str, Path]) -> ShellCheckResult:
        binary = self._ensure_binary()
        return self._run(binary, Path(script_file))

    # -------------------------------------------------------------------------

    def _ensure_binary(self) -> str:
        if self._binary is not None:
            return self._binary

        on_path = shutil.which("shellcheck")
        if on_path:
            self._binary = on_path
            return on_path

        cached = self.cached_binary_path
        if cached.is_file() and os.access(cached, os.X_OK):
            self._binary = str(cached)
            return self._binary

        if not self.allow_download:
            raise ShellCheckUnavailableError(
                "shellcheck is not on PATH and downloading is disabled"
            )

        self._download()
        self._binary = str(cached)
        return self._binary

    def _download(self) -> None:
        os_name, arch = detect_platform()
        known_hash = self.sha256 or PINNED_SHA256.get((self.version, os_name, arch))
        if not known_hash:
            raise ShellCheckUnavailableError(
                f"No pinned SHA-256 for shellcheck {self.version} on {os_name}/{arch}; "
                f"install shellcheck or set {SHA256_ENV_VAR}"
            )

        url = download_url(self.version, os_name, arch)
        logger.info("Downloading shellcheck from %s", url)
        pooch.retrieve(
            url=url,
            known_hash=f"sha256:{known_hash}",
            fname=url.rsplit("/", 1)[-1],
            path=self.cache_dir / self.version,
            processor=pooch.Untar(
                members=[f"shellcheck-{self.version}/shellcheck"],
                extract_dir=_EXTRACT_DIR,
            ),
            downloader=HTTPXDownloader(),
        )

        target = self.cached_binary_path
        if not target.is_file():
            raise ShellCheckUnavailableError(f"shellcheck binary not found in {url}")
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        logger.info("shellcheck cached at %s", target)

    def _run(self, binary: str, script_file: Path) -> ShellCheckResult:
        argv: Sequence[str] = (binary, "-s", "sh", "-f", "gcc", str(script_file))
        completed = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
        return ShellCheckResult(
            success=completed.returncode == 0,
            exit_code=completed.returncode,
            output=tuple(completed.stdout.splitlines()),
        )
