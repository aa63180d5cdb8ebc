from __future__ import annotations

import io
import logging
import os
from types import MappingProxyType
from typing import BinaryIO, Dict, List, Mapping, Union

from .codec import Codec
from .encryption import EncryptionContext
from .errors import AssetNotFound, AssetPackError, SourceUnavailable
from .models import Asset, Frame
from .records import iter_frames

logger = logging.getLogger(__name__)

ContainerSource = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", BinaryIO]


class ContainerReader:
    """Immutable identifier -> Asset index over a container.

    The whole container is scanned, authenticated and decompressed during
    construction; any failure aborts construction so no partial index is
    ever visible. Later frames replace earlier ones with the same
    identifier.
    """

    def __init__(self, source: ContainerSource, key: bytes):
        decryptor = EncryptionContext(key)
        codec = Codec()
        if isinstance(source, (bytes, bytearray, memoryview)):
            assets = self._load(io.BytesIO(bytes(source)), decryptor, codec)
        elif isinstance(source, (str, os.PathLike)):
            try:
                f = open(source, "rb")
            except OSError as e:
                raise SourceUnavailable(f"cannot open container {source}: {e}", stage="source") from e
            with f:
                assets = self._load(f, decryptor, codec)
        else:
            assets = self._load(source, decryptor, codec)
        self._assets: Mapping[str, Asset] = MappingProxyType(assets)

    @classmethod
    def from_bytes(cls, data: bytes, key: bytes) -> "ContainerReader":
        return cls(bytes(data), key)

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"], key: bytes) -> "ContainerReader":
        return cls(os.fspath(path), key)

    @staticmethod
    def _unseal(frame: Frame, decryptor: EncryptionContext, codec: Codec) -> Asset:
        stage = "open"
        try:
            compressed = decryptor.open(frame.payload)
            stage = "decompress"
            content = codec.decompress(compressed)
        except AssetPackError as e:
            if e.identifier is None:
                e.identifier = frame.identifier
            if e.stage is None:
                e.stage = stage
            raise
        return Asset(identifier=frame.identifier, type_tag=frame.type_tag, content=content)

    @classmethod
    def _load(cls, f: BinaryIO, decryptor: EncryptionContext, codec: Codec) -> Dict[str, Asset]:
        assets: Dict[str, Asset] = {}
        frames = iter_frames(f)
        while True:
            try:
                frame = next(frames)
            except StopIteration:
                break
            except AssetPackError as e:
                if e.stage is None:
                    e.stage = "frame"
                raise
            except OSError as e:
                raise SourceUnavailable(f"error reading container: {e}", stage="frame") from e
            if frame.identifier in assets:
                logger.debug("asset %r appears again; later frame wins", frame.identifier)
            assets[frame.identifier] = cls._unseal(frame, decryptor, codec)
        logger.debug("loaded %d assets", len(assets))
        return assets

    @property
    def assets(self) -> Mapping[str, Asset]:
        return self._assets

    def lookup(self, identifier: str) -> Asset:
        try:
            return self._assets[identifier]
        except KeyError:
            raise AssetNotFound("asset not found", identifier=identifier, stage="lookup") from None

    def list(self) -> List[str]:
        return list(self._assets)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._assets

    def __len__(self) -> int:
        return len(self._assets)


def unpack_assets(source: ContainerSource, key: bytes) -> Dict[str, Asset]:
    return dict(ContainerReader(source, key).assets)
