from __future__ import annotations

import gzip
import io
import os
import unittest

from assetpack.codec import Codec
from assetpack.constants import MAX_FIELD_LEN, NONCE_SIZE, TAG_SIZE
from assetpack.encryption import EncryptionContext, open_sealed, seal
from assetpack.errors import (
    AuthenticationFailed,
    CorruptCompressedStream,
    CorruptPayload,
    InvalidFieldError,
    InvalidKey,
    MalformedFrame,
    MalformedLength,
    TruncatedPayload,
)
from assetpack.models import Frame
from assetpack.records import decode_frames, encode_frame, parse_length, read_frame, write_frame


KEY16 = bytes(range(16))


class CodecTests(unittest.TestCase):
    def test_roundtrip_including_empty(self):
        c = Codec()
        for data in (b"", b"\x00", b"hello world\n" * 200, os.urandom(4096)):
            self.assertEqual(c.decompress(c.compress(data)), data)

    def test_output_is_gzip(self):
        data = b"asset bytes " * 50
        self.assertEqual(gzip.decompress(Codec(9).compress(data)), data)
        # and gzip produced elsewhere is accepted
        self.assertEqual(Codec().decompress(gzip.compress(data)), data)

    def test_incompressible_input_may_grow(self):
        data = os.urandom(1024)
        packed = Codec().compress(data)
        self.assertGreater(len(packed), 0)
        self.assertEqual(Codec().decompress(packed), data)

    def test_bad_level(self):
        with self.assertRaises(ValueError):
            Codec(10)
        with self.assertRaises(ValueError):
            Codec(-1)

    def test_corrupt_streams(self):
        c = Codec()
        good = c.compress(b"some content " * 20)
        bad_crc = bytearray(good)
        bad_crc[-6] ^= 0xFF
        for bad in (b"", b"not gzip at all", good[:-3], bytes(bad_crc), good + b"junk"):
            with self.assertRaises(CorruptCompressedStream):
                c.decompress(bad)
        self.assertIs(CorruptPayload, CorruptCompressedStream)


class EncryptionTests(unittest.TestCase):
    def test_seal_open_all_key_sizes(self):
        for n in (16, 24, 32):
            key = os.urandom(n)
            blob = seal(key, b"payload")
            self.assertEqual(len(blob), NONCE_SIZE + len(b"payload") + TAG_SIZE)
            self.assertEqual(open_sealed(key, blob), b"payload")

    def test_empty_plaintext(self):
        ctx = EncryptionContext(KEY16)
        blob = ctx.seal(b"")
        self.assertEqual(len(blob), ctx.overhead())
        self.assertEqual(ctx.open(blob), b"")

    def test_fresh_nonce_per_call(self):
        ctx = EncryptionContext(KEY16)
        a = ctx.seal(b"same")
        b = ctx.seal(b"same")
        self.assertNotEqual(a[:NONCE_SIZE], b[:NONCE_SIZE])
        self.assertNotEqual(a, b)

    def test_invalid_keys(self):
        for key in (b"", b"k" * 15, b"k" * 17, b"k" * 33, "k" * 16, None):
            with self.assertRaises(InvalidKey):
                EncryptionContext(key)
        self.assertTrue(issubclass(InvalidKey, ValueError))

    def test_tamper_and_wrong_key(self):
        ctx = EncryptionContext(KEY16)
        blob = ctx.seal(b"secret content")
        for i in range(len(blob)):
            bad = bytearray(blob)
            bad[i] ^= 0x01
            with self.assertRaises(AuthenticationFailed):
                ctx.open(bytes(bad))
        with self.assertRaises(AuthenticationFailed):
            EncryptionContext(bytes(16)).open(blob)

    def test_blob_too_short(self):
        with self.assertRaises(MalformedFrame):
            EncryptionContext(KEY16).open(b"\x00" * (NONCE_SIZE + TAG_SIZE - 1))


class FrameTests(unittest.TestCase):
    def test_encode_layout(self):
        self.assertEqual(encode_frame(Frame("a", "bin", b"xyz")), b"a:bin:3:xyz")
        self.assertEqual(encode_frame(Frame("e", "t", b"")), b"e:t:0:")

    def test_write_returns_size(self):
        buf = io.BytesIO()
        n = write_frame(buf, Frame("id", "text/plain", b"12345"))
        self.assertEqual(n, len(buf.getvalue()))
        self.assertEqual(buf.getvalue(), b"id:text/plain:5:12345")

    def test_delimiter_rejected(self):
        for ident, tag in (("a:b", "bin"), ("a", "x:y"), (":", "")):
            with self.assertRaises(InvalidFieldError):
                encode_frame(Frame(ident, tag, b""))
        with self.assertRaises(InvalidFieldError):
            encode_frame(Frame(b"bytes-id", "bin", b""))  # type: ignore[arg-type]

    def test_back_to_back_frames(self):
        data = encode_frame(Frame("a", "bin", b"1:2:3")) + encode_frame(Frame("b", "txt", b""))
        frames = list(decode_frames(data))
        self.assertEqual([f.identifier for f in frames], ["a", "b"])
        self.assertEqual(frames[0].payload, b"1:2:3")
        self.assertEqual(frames[1].payload_len, 0)

    def test_clean_end_and_empty_stream(self):
        self.assertIsNone(read_frame(io.BytesIO(b"")))
        self.assertEqual(list(decode_frames(b"")), [])

    def test_truncated_headers(self):
        for data in (b"abc", b"a:", b"a:bin", b"a:bin:", b"a:bin:12"):
            with self.assertRaises(MalformedFrame):
                read_frame(io.BytesIO(data))

    def test_truncated_payload(self):
        with self.assertRaises(TruncatedPayload) as cm:
            read_frame(io.BytesIO(b"a:bin:10:12345"))
        self.assertEqual(cm.exception.expected, 10)
        self.assertEqual(cm.exception.actual, 5)
        self.assertEqual(cm.exception.identifier, "a")

    def test_length_parsing(self):
        self.assertEqual(parse_length(b"0"), 0)
        self.assertEqual(parse_length(b"007"), 7)
        for bad in (b"", b"-1", b"+1", b" 1", b"1 ", b"x1", b"1.0", "١".encode("utf-8")):
            with self.assertRaises(MalformedLength):
                parse_length(bad)
        frame = read_frame(io.BytesIO(b"a:bin:003:xyz"))
        self.assertEqual(frame.payload, b"xyz")

    def test_length_with_long_zero_padding(self):
        # past CPython's 4300-digit int() limit
        self.assertEqual(parse_length(b"0" * 5000 + b"3"), 3)
        self.assertEqual(parse_length(b"0" * 5000), 0)
        frame = read_frame(io.BytesIO(b"a:bin:" + b"0" * 5000 + b"3:xyz"))
        self.assertEqual(frame.payload, b"xyz")

    def test_length_with_too_many_digits(self):
        for raw in (b"1" * 21, b"9" * 5000, b"0" * 10 + b"1" * 21):
            with self.assertRaises(MalformedLength):
                parse_length(raw)
        with self.assertRaises(MalformedFrame) as cm:
            read_frame(io.BytesIO(b"a:bin:" + b"7" * 5000 + b":xyz"))
        self.assertEqual(cm.exception.identifier, "a")

    def test_oversized_field(self):
        with self.assertRaises(MalformedFrame):
            read_frame(io.BytesIO(b"a" * (MAX_FIELD_LEN + 1) + b":bin:0:"))

    def test_non_utf8_identifier(self):
        with self.assertRaises(MalformedFrame):
            read_frame(io.BytesIO(b"\xff\xfe:bin:0:"))


if __name__ == "__main__":
    unittest.main()
