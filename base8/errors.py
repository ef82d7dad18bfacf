"""
Base8 exception hierarchy.

All codec errors inherit from Base8Error, which is a ValueError so callers
that already guard decode calls with ``except ValueError`` keep working.
"""


class Base8Error(ValueError):
    """Base exception for all base8 codec errors."""
    pass


class CorruptInputError(Base8Error):
    """Raised when encoded input is malformed.

    ``offset`` is the byte position in the input where the defect was first
    detected. ``written`` is the number of bytes that decoded cleanly before it.
    """

    def __init__(self, offset: int, written: int = 0):
        super().__init__(f"illegal base8 data at input byte {offset}")
        self.offset = offset
        self.written = written


class UnexpectedEndError(Base8Error, EOFError):
    """Raised when a stream source ends in the middle of a quantum."""

    def __init__(self, offset: int, buffered: int):
        super().__init__(
            f"base8 stream ended inside a quantum at input byte {offset} "
            f"({buffered} dangling symbol{'s' if buffered != 1 else ''})"
        )
        self.offset = offset
        self.buffered = buffered
