from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Asset:
    """A named, typed blob.

    ``content`` is ``None`` when the writer should fetch the bytes from its
    byte provider using ``identifier``.
    """

    identifier: str
    type_tag: str
    content: Optional[bytes] = None


@dataclass(frozen=True)
class Frame:
    identifier: str
    type_tag: str
    payload: bytes

    @property
    def payload_len(self) -> int:
        return len(self.payload)
