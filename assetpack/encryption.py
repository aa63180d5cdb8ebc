from __future__ import annotations

from Cryptodome.Cipher import AES
from Cryptodome.Random import get_random_bytes

from .constants import NONCE_SIZE, TAG_SIZE, VALID_KEY_SIZES
from .errors import AuthenticationFailed, InvalidKey, MalformedFrame


def check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidKey(f"key must be bytes, not {type(key).__name__}")
    key = bytes(key)
    if len(key) not in VALID_KEY_SIZES:
        raise InvalidKey(f"key must be 16, 24 or 32 bytes, got {len(key)}")
    return key


class EncryptionContext:
    """AES-GCM sealing of whole payloads.

    A sealed blob is ``nonce || ciphertext || tag``. The nonce is random and
    drawn per call; no associated data is bound.
    """

    def __init__(self, key: bytes):
        self.key = check_key(key)

    def _cipher(self, nonce: bytes):
        return AES.new(self.key, AES.MODE_GCM, nonce=nonce, mac_len=TAG_SIZE)

    def seal(self, plaintext: bytes) -> bytes:
        nonce = get_random_bytes(NONCE_SIZE)
        ciphertext, tag = self._cipher(nonce).encrypt_and_digest(plaintext)
        return nonce + ciphertext + tag

    def open(self, blob: bytes) -> bytes:
        if len(blob) < NONCE_SIZE + TAG_SIZE:
            raise MalformedFrame(
                f"sealed payload too short: {len(blob)} bytes, need at least {NONCE_SIZE + TAG_SIZE}"
            )
        nonce = blob[:NONCE_SIZE]
        tag = blob[-TAG_SIZE:]
        ciphertext = blob[NONCE_SIZE:-TAG_SIZE]
        try:
            return self._cipher(nonce).decrypt_and_verify(ciphertext, tag)
        except ValueError as e:
            # wrong key or tampered bytes; nothing of the plaintext escapes
            raise AuthenticationFailed("authentication failed") from e

    def overhead(self) -> int:
        return NONCE_SIZE + TAG_SIZE


def seal(key: bytes, plaintext: bytes) -> bytes:
    return EncryptionContext(key).seal(plaintext)


def open_sealed(key: bytes, blob: bytes) -> bytes:
    return EncryptionContext(key).open(blob)
