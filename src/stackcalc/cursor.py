"""
Source Cursor
=============

Read-only scanning over the characters of a source expression.

The cursor never mutates the source. Its position only moves forward and
stops at len(source), where peek() returns the end sentinel (None).
Reads past the end never fault.

Example Usage
-------------
>>> from stackcalc.cursor import Cursor
>>> cursor = Cursor("2+4")
>>> cursor.peek()
'2'
>>> cursor.advance()
>>> cursor.peek(), cursor.position
('+', 1)
"""

from typing import Optional


class Cursor:
    """
    Forward-only cursor over a source string.

    Attributes:
        source: The text being scanned
        position: Zero-based offset of the current character
    """

    def __init__(self, source: str, skip_whitespace: bool = False):
        """
        Create a cursor at the start of the source.

        Args:
            source: Text to scan
            skip_whitespace: If True, whitespace is stepped over so peek()
                             only ever returns significant characters.
                             Positions still refer to the original text.
        """
        self._source = source
        self._pos = 0
        self._skip_whitespace = skip_whitespace
        self._skip()

    @property
    def source(self) -> str:
        return self._source

    @property
    def position(self) -> int:
        return self._pos

    @property
    def at_end(self) -> bool:
        """True once every character has been consumed."""
        return self._pos >= len(self._source)

    def peek(self) -> Optional[str]:
        """Return the current character, or None at end of input."""
        if self._pos >= len(self._source):
            return None
        return self._source[self._pos]

    def advance(self) -> None:
        """Move past the current character. Does nothing at end of input."""
        if self._pos < len(self._source):
            self._pos += 1
            self._skip()

    def _skip(self) -> None:
        if not self._skip_whitespace:
            return
        while self._pos < len(self._source) and self._source[self._pos].isspace():
            self._pos += 1

    def __repr__(self) -> str:
        return f"Cursor(position={self._pos}, length={len(self._source)})"
