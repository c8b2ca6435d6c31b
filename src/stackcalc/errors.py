"""
stackcalc Error Hierarchy
=========================

This module defines the exception hierarchy for the stackcalc package.
All exceptions inherit from StackCalcError, allowing callers to catch all
package errors with a single except clause if desired.

Exception Hierarchy
-------------------
StackCalcError (base)
├── ParseError (grammar violations found while compiling)
│   ├── UnexpectedSymbolError - a factor was expected, something else found
│   ├── UnbalancedParenError - '(' without a matching ')'
│   ├── UnexpectedEndOfInputError - input ended where a factor was expected
│   ├── TrailingInputError - characters left after a complete expression
│   └── NestingTooDeepError - parentheses nested beyond the configured limit
├── ListingFormatError - malformed program listing
└── MachineError (stack machine run-time faults)
    ├── StackUnderflowError - pop from an empty stack
    ├── FinalStackError - program did not leave exactly one value
    └── DivisionByZeroError - DIV with a zero divisor

Error Message Format
--------------------
Parse errors carry the zero-based position in the source expression.
When the source text is known the message includes it with a caret:

    error: unexpected symbol 'x' at position 2
        2+x
          ^
    hint: expected a digit or '('

Malformed input is an expected condition: every parse error is raised to
the caller of compile and never terminates the process.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class StackCalcError(Exception):
    """
    Base exception for all stackcalc errors.

    Catch this to handle any failure raised by the compiler, the listing
    decoder or the stack machine:

        try:
            execute(compile_expression("2+"))
        except StackCalcError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Parse Errors
# =============================================================================

class ParseError(StackCalcError):
    """
    Base exception for grammar violations.

    The first violation aborts the whole compile; no partial program is
    ever returned alongside a ParseError.

    Attributes:
        message: The error description
        position: Zero-based offset into the source (len(source) means end)
        source: The source expression, when known
        hint: A suggestion for fixing the error (optional)
    """

    kind = "ParseError"

    def __init__(
        self,
        message: str,
        position: int,
        source: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.position = position
        self.source = source
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with position, source context, and hint.

        Example output:
            error: unexpected end of input at position 2
                2+
                  ^
            hint: an operator must be followed by a digit or '('
        """
        parts = [f"error: {self.message} at position {self.position}"]

        # Source context with caret pointer, on the line holding the position
        if self.source is not None:
            line, column = self._source_line()
            parts.append(f"    {line}")
            # Tabs are kept so the caret lines up with the echoed text
            padding = "".join(c if c == "\t" else " " for c in line[:column])
            parts.append(f"    {padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def _source_line(self) -> tuple[str, int]:
        """Return the source line containing the position and the column in it."""
        start = self.source.rfind("\n", 0, self.position) + 1
        end = self.source.find("\n", self.position)
        if end == -1:
            end = len(self.source)
        return self.source[start:end], self.position - start

    def _key(self) -> tuple:
        return (self.kind, self.position)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"{self.kind}({self.position})"


class UnexpectedSymbolError(ParseError):
    """
    A factor was expected but the current character is neither a digit
    nor an opening parenthesis.

    Example:
        2+*3    ; '*' at position 2
    """

    kind = "UnexpectedSymbol"

    def __init__(self, char: str, position: int, source: Optional[str] = None):
        self.char = char
        hint = "expected a digit or '('"
        if char.isspace():
            hint = "whitespace is not accepted unless skip_whitespace is enabled"
        super().__init__(
            f"unexpected symbol {char!r}",
            position,
            source=source,
            hint=hint,
        )

    def _key(self) -> tuple:
        return (self.kind, self.char, self.position)

    def __repr__(self) -> str:
        return f"{self.kind}({self.char!r}, {self.position})"


class UnbalancedParenError(ParseError):
    """
    An opening parenthesis has no matching ')'.

    The position is that of the unmatched '(' itself, not of the place
    where the closing parenthesis was missed.
    """

    kind = "UnbalancedParen"

    def __init__(self, position: int, source: Optional[str] = None):
        super().__init__(
            "unbalanced parenthesis opened",
            position,
            source=source,
            hint="add ')' to close the group",
        )


class UnexpectedEndOfInputError(ParseError):
    """Input ended where a digit or '(' was still expected."""

    kind = "UnexpectedEndOfInput"

    def __init__(self, position: int, source: Optional[str] = None):
        super().__init__(
            "unexpected end of input",
            position,
            source=source,
            hint="an operator must be followed by a digit or '('",
        )


class TrailingInputError(ParseError):
    """Characters remain after a complete top-level expression."""

    kind = "TrailingInput"

    def __init__(self, position: int, source: Optional[str] = None):
        super().__init__(
            "trailing input after complete expression",
            position,
            source=source,
        )


class NestingTooDeepError(ParseError):
    """
    Parentheses are nested deeper than the configured limit.

    The recursive parser uses one group of Python frames per nesting
    level, so it always enforces a limit instead of letting a
    RecursionError escape. When a configured limit is larger than the
    interpreter stack allows, the reported limit is the depth actually
    reached.
    """

    kind = "NestingTooDeep"

    def __init__(self, position: int, limit: int, source: Optional[str] = None):
        self.limit = limit
        super().__init__(
            f"parentheses nested deeper than {limit} levels",
            position,
            source=source,
            hint="use the explicit-stack strategy for deeply nested input",
        )


# =============================================================================
# Listing Errors
# =============================================================================

class ListingFormatError(StackCalcError):
    """
    Malformed line in a program listing.

    Attributes:
        message: The error description
        line: Line number (1-indexed) in the listing text
        text: The offending line, when known
    """

    def __init__(self, message: str, line: int, text: Optional[str] = None):
        self.message = message
        self.line = line
        self.text = text
        if text is not None:
            super().__init__(f"error: line {line}: {message}\n    {text}")
        else:
            super().__init__(f"error: line {line}: {message}")


# =============================================================================
# Stack Machine Errors
# =============================================================================

class MachineError(StackCalcError):
    """
    Base exception for stack machine run-time faults.

    Attributes:
        message: The error description
        pc: Index of the faulting instruction (None when not tied to one)
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.message = message
        self.pc = pc
        if pc is not None:
            super().__init__(f"error: {message} (instruction {pc})")
        else:
            super().__init__(f"error: {message}")


class StackUnderflowError(MachineError):
    """POP executed with an empty stack."""
    pass


class FinalStackError(MachineError):
    """
    The program halted without exactly one value on the stack.

    Attributes:
        depth: Number of values left on the stack
    """

    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"program left {depth} values on the stack, expected 1")


class DivisionByZeroError(MachineError):
    """DIV executed with a zero divisor."""

    def __init__(self, pc: Optional[int] = None):
        super().__init__("division by zero", pc)
