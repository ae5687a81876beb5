"""Shared fixtures: small runnable JARs built with zipfile."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Optional

import pytest

MakeJar = Callable[..., Path]


def write_jar(
    path: Path,
    *,
    main_class: Optional[str] = "com.example.Main",
    manifest: Optional[str] = None,
    extra_entries: Optional[dict[str, bytes]] = None,
) -> Path:
    """Write a JAR with a manifest and a couple of entries.

    Entries get a fixed timestamp so the same call yields the same bytes.
    """
    if manifest is None:
        manifest = "Manifest-Version: 1.0\r\n"
        if main_class is not None:
            manifest += f"Main-Class: {main_class}\r\n"
        manifest += "\r\n"

    entries: dict[str, bytes] = {
        "META-INF/MANIFEST.MF": manifest.encode("utf-8"),
        "com/example/Main.class": b"\xca\xfe\xba\xbe",
        "test.txt": b"Hello, World!",
    }
    entries.update(extra_entries or {})

    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            info = zipfile.ZipInfo(name, date_time=(2024, 1, 1, 0, 0, 0))
            info.compress_type = zipfile.ZIP_DEFLATED
            zf.writestr(info, data)
    return path


@pytest.fixture
def make_jar(tmp_path: Path) -> MakeJar:
    def _make(name: str = "test-app", **kwargs) -> Path:
        return write_jar(tmp_path / f"{name}.jar", **kwargs)

    return _make


class FakeShellCheck:
    """Stand-in script validator with a canned result."""

    def __init__(self, *, available: bool = True, result=None):
        self.available = available
        self.result = result
        self.validated: list[str] = []

    def is_available(self) -> bool:
        return self.available

    def validate(self, script_content: str):
        self.validated.append(script_content)
        return self.result
