"""Pure Python JAR checks (no Pants dependencies).

A runnable JAR is a ZIP file whose META-INF/MANIFEST.MF main section
carries a non-blank Main-Class attribute.
"""

from __future__ import annotations

import os
import re
import zipfile
from pathlib import Path
from typing import Optional, Union

from pants_execjar._exceptions import JarValidationError

MANIFEST_PATH = "META-INF/MANIFEST.MF"
MAIN_CLASS_ATTRIBUTE = "Main-Class"

# Trailing version like -1.0.0, -2.1 or -1.0-SNAPSHOT.
_VERSION_SUFFIX = re.compile(r"-\d+(\.\d+)*(-SNAPSHOT)?$")


def parse_manifest(text: str) -> dict[str, str]:
    """Parse the main section of a JAR manifest.

    Lines starting with a single space continue the previous value.
    Parsing stops at the first blank line (end of the main section).
    """
    attributes: dict[str, str] = {}
    last_key: Optional[str] = None
    for line in text.splitlines():
        if not line:
            if attributes:
                break
            continue
        if line.startswith(" "):
            if last_key is not None:
                attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        attributes[last_key] = value.lstrip(" ")
    return attributes


def validate_jar(jar_file: Optional[Union[str, Path]]) -> str:
    """Check that a file is a runnable JAR and return its Main-Class."""
    if jar_file is None:
        raise JarValidationError("JAR file path cannot be None")

    path = Path(jar_file)
    if not path.exists():
        raise JarValidationError(f"JAR file does not exist: {path}", path=path)
    if not path.is_file():
        raise JarValidationError(f"Path is not a regular file: {path}", path=path)
    if not os.access(path, os.R_OK):
        raise JarValidationError(f"JAR file is not readable: {path}", path=path)

    try:
        with zipfile.ZipFile(path) as jar:
            try:
                raw = jar.read(MANIFEST_PATH)
            except KeyError:
                raise JarValidationError(
                    f"JAR file does not contain a {MANIFEST_PATH}: {path}", path=path
                ) from None
    except zipfile.BadZipFile as e:
        raise JarValidationError(f"Failed to read JAR file: {path}: {e}", path=path) from e
    except OSError as e:
        raise JarValidationError(f"Failed to read JAR file: {path}: {e}", path=path) from e

    attributes = parse_manifest(raw.decode("utf-8", errors="replace"))
    main_class = attributes.get(MAIN_CLASS_ATTRIBUTE, "").strip()
    if not main_class:
        raise JarValidationError(
            f"JAR manifest does not contain a {MAIN_CLASS_ATTRIBUTE} attribute: {path}",
            path=path,
        )
    return main_class


def extract_artifact_name(jar_file: Union[str, Path]) -> str:
    """Derive an artifact name from a JAR file name.

    Example: extract_artifact_name("target/my-app-1.0-SNAPSHOT.jar") -> "my-app"
    """
    name = Path(jar_file).name
    if name.lower().endswith(".jar"):
        name = name[: -len(".jar")]
    name = _VERSION_SUFFIX.sub("", name)
    return name or "application"
