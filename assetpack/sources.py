from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Protocol, Union

from .errors import SourceUnavailable


class AssetSource(Protocol):
    """Provides the raw bytes of an asset by identifier."""

    def read(self, identifier: str) -> bytes:
        ...


def _relative_path(identifier: str) -> str:
    """Map an identifier to a canonical relative path below a source root.

    Backslashes become slashes, leading/trailing slashes and empty or '.'
    segments are dropped, and '..' is refused.
    """
    p = identifier.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    if not parts:
        raise SourceUnavailable("empty asset path", identifier=identifier, stage="source")
    if ".." in parts:
        raise SourceUnavailable("asset path may not contain '..'", identifier=identifier, stage="source")
    return "/".join(parts)


class FileSystemSource:
    """Reads asset content from files under ``root``; the identifier is the
    file's path relative to ``root``."""

    def __init__(self, root: Union[str, "os.PathLike[str]"] = "."):
        self.root = Path(root)

    def path_for(self, identifier: str) -> Path:
        return self.root / _relative_path(identifier)

    def read(self, identifier: str) -> bytes:
        path = self.path_for(identifier)
        try:
            return path.read_bytes()
        except OSError as e:
            raise SourceUnavailable(f"error reading {path}: {e}", identifier=identifier, stage="source") from e


class MemorySource:
    def __init__(self, blobs: Mapping[str, bytes]):
        self.blobs = dict(blobs)

    def read(self, identifier: str) -> bytes:
        try:
            return self.blobs[identifier]
        except KeyError:
            raise SourceUnavailable("no such asset in memory source", identifier=identifier, stage="source") from None
