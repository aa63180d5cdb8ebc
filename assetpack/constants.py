# Frame delimiter (0x3A, ":") separating identifier, type tag and length
DELIM = b":"

# AES-GCM parameters
NONCE_SIZE = 12
TAG_SIZE = 16
VALID_KEY_SIZES = (16, 24, 32)  # AES-128 / AES-192 / AES-256

# gzip stream (deflate + CRC32/ISIZE trailer) via zlib
GZIP_WBITS = 31
DEFAULT_COMPRESSION_LEVEL = 6

# Upper bound on a single header field (identifier, type tag, length)
MAX_FIELD_LEN = 64 * 1024

# Significant digits allowed in a length field once leading zeros are dropped
MAX_LENGTH_DIGITS = 20  # covers any u64

# Payload bytes are pulled from the source in pieces of at most this size
READ_CHUNK_SIZE = 1_048_576  # 1 MiB
