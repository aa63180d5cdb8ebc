"""
assetpack: sealed asset containers.

Packs named, typed binary assets into one container stream and reads them
back by identifier:

- Each asset is gzip-compressed and then sealed with AES-GCM (random 12-byte
  nonce per asset, 16-byte tag).
- Frames are ``identifier:type_tag:length:payload`` back to back, with no
  container header; the length field is the only resynchronisation point.
- Readers scan the whole stream up front and expose an immutable index;
  any malformed, truncated or unauthenticated frame fails the whole load.
"""

import logging

from .errors import (
    AssetPackError,
    SourceUnavailable,
    SinkUnavailable,
    InvalidKey,
    InvalidFieldError,
    MalformedFrame,
    MalformedLength,
    TruncatedPayload,
    AuthenticationFailed,
    CorruptCompressedStream,
    CorruptPayload,
    AssetNotFound,
)
from .models import Asset, Frame
from .sources import AssetSource, FileSystemSource, MemorySource
from .writer import ContainerWriter, pack_assets, pack_to_bytes
from .reader import ContainerReader, unpack_assets

__version__ = "0.1"

__all__ = [
    "Asset",
    "Frame",
    "AssetSource",
    "FileSystemSource",
    "MemorySource",
    "ContainerWriter",
    "ContainerReader",
    "pack_assets",
    "pack_to_bytes",
    "unpack_assets",
    "AssetPackError",
    "SourceUnavailable",
    "SinkUnavailable",
    "InvalidKey",
    "InvalidFieldError",
    "MalformedFrame",
    "MalformedLength",
    "TruncatedPayload",
    "AuthenticationFailed",
    "CorruptCompressedStream",
    "CorruptPayload",
    "AssetNotFound",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
