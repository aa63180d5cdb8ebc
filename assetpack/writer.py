from __future__ import annotations

import concurrent.futures as _fut
import io
import logging
import os
from contextlib import contextmanager
from typing import BinaryIO, Iterable, Optional, Union

from .codec import Codec
from .encryption import EncryptionContext
from .errors import AssetPackError, SinkUnavailable, SourceUnavailable
from .models import Asset, Frame
from .records import validate_field, write_frame
from .sources import AssetSource

logger = logging.getLogger(__name__)


@contextmanager
def _stage(identifier, stage: str):
    try:
        yield
    except AssetPackError as e:
        if e.identifier is None:
            e.identifier = identifier
        if e.stage is None:
            e.stage = stage
        raise


class ContainerWriter:
    """Writes assets as sealed frames, in order, to a path or binary stream.

    Each asset goes through its own compress -> seal -> frame pipeline; the
    only thing shared between assets is the key and the output position.
    With ``workers`` > 1 the compress/seal steps run on a thread pool while
    frames are still written in input order.
    """

    def __init__(
        self,
        out: Union[str, "os.PathLike[str]", BinaryIO],
        key: bytes,
        *,
        source: Optional[AssetSource] = None,
        compression_level: Optional[int] = None,
        workers: Optional[int] = None,
    ):
        self.out = out
        self.f: Optional[BinaryIO] = None
        self._owns_file = False
        self.encryptor = EncryptionContext(key)
        self.codec = Codec(compression_level)
        self.source = source
        self.workers = workers

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        if isinstance(self.out, (str, os.PathLike)):
            try:
                self.f = open(self.out, "wb")
            except OSError as e:
                raise SinkUnavailable(f"cannot open {self.out} for writing: {e}", stage="sink") from e
            self._owns_file = True
        else:
            self.f = self.out

    def close(self):
        if self.f is not None:
            if self._owns_file:
                self.f.close()
            else:
                self.f.flush()
            self.f = None
            self._owns_file = False

    def _content(self, asset: Asset) -> bytes:
        if asset.content is not None:
            content = asset.content
        elif self.source is None:
            raise SourceUnavailable("asset has no content and the writer has no source")
        else:
            try:
                content = self.source.read(asset.identifier)
            except OSError as e:
                raise SourceUnavailable(f"error reading asset: {e}") from e
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise SourceUnavailable(f"asset content must be bytes, not {type(content).__name__}")
        return bytes(content)

    def seal_asset(self, asset: Asset) -> Frame:
        """Run one asset through compress and seal, returning its frame."""
        ident = asset.identifier
        with _stage(ident, "frame"):
            validate_field("identifier", asset.identifier)
            validate_field("type tag", asset.type_tag)
        with _stage(ident, "source"):
            content = self._content(asset)
        with _stage(ident, "compress"):
            compressed = self.codec.compress(content)
        with _stage(ident, "seal"):
            sealed = self.encryptor.seal(compressed)
        return Frame(identifier=ident, type_tag=asset.type_tag, payload=sealed)

    def _emit(self, frame: Frame) -> int:
        with _stage(frame.identifier, "frame"):
            try:
                n = write_frame(self.f, frame)
            except OSError as e:
                raise SinkUnavailable(f"error writing frame: {e}") from e
        logger.debug("wrote frame %r: %s:%d (%d bytes total)", frame.identifier, frame.type_tag, frame.payload_len, n)
        return n

    def add(self, asset: Asset) -> int:
        """Pack a single asset; returns the number of bytes appended."""
        if self.f is None:
            raise RuntimeError("Container not open")
        return self._emit(self.seal_asset(asset))

    def write(self, assets: Iterable[Asset]) -> int:
        """Pack ``assets`` in order and return the total bytes written.

        The first failure aborts the run and propagates; whatever was already
        written does not form a valid container.
        """
        if self.f is None:
            raise RuntimeError("Container not open")
        total = 0
        count = 0
        if self.workers is not None and self.workers > 1:
            with _fut.ThreadPoolExecutor(max_workers=self.workers) as ex:
                futures = [ex.submit(self.seal_asset, a) for a in assets]
                try:
                    for fut in futures:
                        total += self._emit(fut.result())
                        count += 1
                except BaseException:
                    for fut in futures:
                        fut.cancel()
                    raise
        else:
            for asset in assets:
                total += self.add(asset)
                count += 1
        logger.debug("packed %d assets, %d bytes", count, total)
        return total

    invoke = write


def pack_assets(
    assets: Iterable[Asset],
    out: Union[str, "os.PathLike[str]", BinaryIO],
    key: bytes,
    **kwargs,
) -> int:
    with ContainerWriter(out, key, **kwargs) as w:
        return w.write(assets)


def pack_to_bytes(assets: Iterable[Asset], key: bytes, **kwargs) -> bytes:
    buf = io.BytesIO()
    pack_assets(assets, buf, key, **kwargs)
    return buf.getvalue()
