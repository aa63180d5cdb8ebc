from __future__ import annotations

from typing import Optional


class AssetPackError(Exception):
    """Base class for assetpack errors.

    ``identifier`` and ``stage`` are filled in by the writer/reader when a
    failure can be attributed to one asset and one pipeline step.
    """

    def __init__(self, message: str = "", *, identifier: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.identifier = identifier
        self.stage = stage

    def __str__(self) -> str:
        where = []
        if self.identifier is not None:
            where.append(f"asset {self.identifier!r}")
        if self.stage is not None:
            where.append(f"stage {self.stage}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


# Write side
class SourceUnavailable(AssetPackError):
    pass


class SinkUnavailable(AssetPackError):
    pass


class InvalidKey(AssetPackError, ValueError):
    pass


class InvalidFieldError(AssetPackError, ValueError):
    pass


# Read side
class MalformedFrame(AssetPackError):
    pass


class TruncatedPayload(MalformedFrame):
    def __init__(self, message: str = "", *, expected: int = 0, actual: int = 0, **kw):
        super().__init__(message, **kw)
        self.expected = expected
        self.actual = actual


class AuthenticationFailed(AssetPackError):
    pass


class CorruptCompressedStream(AssetPackError):
    pass


class AssetNotFound(AssetPackError, KeyError):
    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return AssetPackError.__str__(self)


# Names used by the format description
MalformedLength = MalformedFrame
CorruptPayload = CorruptCompressedStream
