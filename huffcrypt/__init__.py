from .compression import Compressor, compress_bytes, decompress_bytes
from .exceptions import (
    CorruptHeaderError,
    HuffcryptError,
    MissingEndMarkerError,
    MissingSymbolError,
    TruncatedStreamError,
)
from .huffman import PSEUDO_EOF

__version__ = "0.1.0"
