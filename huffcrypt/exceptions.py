class HuffcryptError(Exception):
    """Base class for every failure raised while compressing or decompressing."""


class MissingEndMarkerError(HuffcryptError, ValueError):
    """A frequency table handed to the header writer has no end marker entry."""


class CorruptHeaderError(HuffcryptError, ValueError):
    """The deciphered header describes a table that cannot exist.

    Usually the result of a wrong password or a file that was not produced
    by huffcrypt.
    """


class TruncatedStreamError(HuffcryptError, EOFError):
    """The input ran out before the header or the end marker was read."""


class MissingSymbolError(HuffcryptError, KeyError):
    """A byte was seen during encoding that has no code in the code table."""
