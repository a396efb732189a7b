"""Module holds constant values for use throughout the program."""

# Metainfo Configuration
PIECE_HASH_LEN = 20  # SHA-1 digest width

# Bencode Configuration
INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1
MAX_NESTING_DEPTH = 200

# Reject unsorted dictionary keys, and trailing bytes when loading a Torrent.
STRICT_DECODING = False
