from __future__ import annotations

import io
import logging
from typing import BinaryIO, Iterator, Optional

from .constants import DELIM, MAX_FIELD_LEN, MAX_LENGTH_DIGITS, READ_CHUNK_SIZE
from .errors import InvalidFieldError, MalformedFrame, TruncatedPayload
from .models import Frame

logger = logging.getLogger(__name__)


# Frame layout (no container header, frames are back to back):
#   identifier ":" type_tag ":" decimal(payload_len) ":" payload
#  - identifier, type_tag: UTF-8, must not contain ":" (no escaping exists)
#  - payload_len: unsigned base-10 ASCII, leading zeros accepted
#  - payload: exactly payload_len raw bytes, no trailing separator


def validate_field(name: str, value: str) -> bytes:
    """Return the wire bytes for a header field or raise InvalidFieldError.

    A delimiter inside a field would shift every later field boundary in
    the stream, so it is rejected here rather than written.
    """
    if not isinstance(value, str):
        raise InvalidFieldError(f"{name} must be str, not {type(value).__name__}")
    try:
        raw = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidFieldError(f"{name} {value!r} is not encodable as UTF-8") from e
    if DELIM in raw:
        raise InvalidFieldError(f"{name} {value!r} contains the frame delimiter {DELIM.decode()!r}")
    if len(raw) > MAX_FIELD_LEN:
        raise InvalidFieldError(f"{name} is {len(raw)} bytes; limit is {MAX_FIELD_LEN}")
    return raw


def _frame_header(frame: Frame) -> bytes:
    ident = validate_field("identifier", frame.identifier)
    type_tag = validate_field("type tag", frame.type_tag)
    length = str(len(frame.payload)).encode("ascii")
    return ident + DELIM + type_tag + DELIM + length + DELIM


def encode_frame(frame: Frame) -> bytes:
    return _frame_header(frame) + frame.payload


def write_frame(f: BinaryIO, frame: Frame) -> int:
    """Append one frame to ``f``; returns the number of bytes written."""
    header = _frame_header(frame)
    f.write(header)
    f.write(frame.payload)
    return len(header) + len(frame.payload)


def _read_field(f: BinaryIO, what: str, *, allow_eof: bool = False) -> Optional[bytes]:
    buf = bytearray()
    while True:
        b = f.read(1)
        if not b:
            if allow_eof and not buf:
                return None
            raise MalformedFrame(f"unexpected end of stream while reading {what}")
        if b == DELIM:
            return bytes(buf)
        if len(buf) >= MAX_FIELD_LEN:
            raise MalformedFrame(f"{what} exceeds {MAX_FIELD_LEN} bytes without a delimiter")
        buf += b


def _decode_field(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedFrame(f"{what} is not valid UTF-8") from e


def parse_length(raw: bytes) -> int:
    # bytes.isdigit() only accepts ASCII 0-9, so signs, spaces and "" fail
    if not raw or not raw.isdigit():
        raise MalformedFrame(f"malformed length field {raw[:32]!r}")
    # any number of leading zeros is legal; int() refuses very long digit strings
    digits = raw.lstrip(b"0") or b"0"
    if len(digits) > MAX_LENGTH_DIGITS:
        raise MalformedFrame(f"length field has {len(digits)} significant digits; limit is {MAX_LENGTH_DIGITS}")
    return int(digits)


def read_exact(f: BinaryIO, n: int) -> bytes:
    parts = []
    remaining = n
    while remaining > 0:
        b = f.read(min(remaining, READ_CHUNK_SIZE))
        if not b:
            break
        parts.append(b)
        remaining -= len(b)
    data = b"".join(parts)
    if len(data) != n:
        raise TruncatedPayload(
            f"payload truncated: expected {n} bytes, got {len(data)}",
            expected=n,
            actual=len(data),
        )
    return data


def read_frame(f: BinaryIO) -> Optional[Frame]:
    """Read the next frame from ``f``.

    Returns None on a clean end of stream (nothing read for a new frame).
    A frame that was started but cannot be completed raises MalformedFrame
    or TruncatedPayload and is never returned in part.
    """
    raw_ident = _read_field(f, "identifier", allow_eof=True)
    if raw_ident is None:
        return None
    identifier = _decode_field(raw_ident, "identifier")
    try:
        type_tag = _decode_field(_read_field(f, "type tag"), "type tag")
        length = parse_length(_read_field(f, "length"))
        payload = read_exact(f, length)
    except MalformedFrame as e:
        if e.identifier is None:
            e.identifier = identifier
        raise
    logger.debug("read frame %r (%s, %d bytes)", identifier, type_tag, length)
    return Frame(identifier=identifier, type_tag=type_tag, payload=payload)


def iter_frames(f: BinaryIO) -> Iterator[Frame]:
    while True:
        frame = read_frame(f)
        if frame is None:
            return
        yield frame


def decode_frames(data: bytes) -> Iterator[Frame]:
    return iter_frames(io.BytesIO(data))
