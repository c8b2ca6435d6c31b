"""
Explicit-Stack Expression Parser
================================

An operator-precedence (shunting-yard) compiler that accepts the same
grammar as the recursive descent parser and produces exactly the same
instructions and the same errors, without using the Python call stack.

Memory use is bounded by the input length, so arbitrarily deep
parenthesis nesting compiles without hitting the interpreter's
recursion limit.

Algorithm
---------
The parser alternates between two states:

    OPERAND   expects a digit or '('
    OPERATOR  expects '+', '-', '*', '/', ')' or end of input

Digits are emitted immediately. Operators wait on an owned stack and are
emitted once an operator of lower or equal precedence (or a closing
parenthesis, or the end of input) arrives. Popping on equal precedence
is what makes the operators left-associative.

Open parentheses are kept on the same stack as markers carrying their
source position, which is the position reported by UnbalancedParenError.
"""

import logging
from enum import Enum, auto
from typing import Optional

from stackcalc.cursor import Cursor
from stackcalc.emitter import Emitter
from stackcalc.errors import (
    NestingTooDeepError,
    TrailingInputError,
    UnbalancedParenError,
    UnexpectedEndOfInputError,
    UnexpectedSymbolError,
)
from stackcalc.instructions import DIGITS, Program

logger = logging.getLogger(__name__)

PRECEDENCE = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
}


class _State(Enum):
    OPERAND = auto()
    OPERATOR = auto()


class _OpenParen:
    """Stack marker for an unclosed '('."""

    __slots__ = ("position",)

    def __init__(self, position: int):
        self.position = position


class ExplicitStackParser:
    """
    Compiles expressions with an owned operator stack.

    Attributes:
        max_nesting: Deepest parenthesis nesting accepted (None = unlimited)
        skip_whitespace: Step over whitespace instead of rejecting it
        max_depth: Deepest nesting seen by the last successful compile
    """

    def __init__(
        self,
        skip_whitespace: bool = False,
        max_nesting: Optional[int] = None,
    ):
        self.skip_whitespace = skip_whitespace
        self.max_nesting = max_nesting
        self.max_depth = 0

    def compile(self, source: str) -> Program:
        """
        Compile an expression.

        Args:
            source: Expression text

        Returns:
            The instruction sequence

        Raises:
            ParseError: On the first grammar violation
        """
        cursor = Cursor(source, skip_whitespace=self.skip_whitespace)
        emitter = Emitter()
        stack: list = []        # operator chars and _OpenParen markers
        parens: list[int] = []  # positions of open parens, innermost last
        state = _State.OPERAND
        deepest = 0

        while True:
            char = cursor.peek()
            pos = cursor.position

            if state is _State.OPERAND:
                if char is None:
                    if parens:
                        raise UnbalancedParenError(parens[-1], source)
                    raise UnexpectedEndOfInputError(pos, source)
                if char in DIGITS:
                    emitter.emit_push_digit(char)
                    state = _State.OPERATOR
                elif char == "(":
                    if self.max_nesting is not None and len(parens) >= self.max_nesting:
                        raise NestingTooDeepError(pos, self.max_nesting, source)
                    stack.append(_OpenParen(pos))
                    parens.append(pos)
                    deepest = max(deepest, len(parens))
                else:
                    raise UnexpectedSymbolError(char, pos, source)
                cursor.advance()
                continue

            # OPERATOR state
            if char in PRECEDENCE:
                while stack and not isinstance(stack[-1], _OpenParen) \
                        and PRECEDENCE[stack[-1]] >= PRECEDENCE[char]:
                    emitter.emit_binary_op(stack.pop())
                stack.append(char)
                state = _State.OPERAND
                cursor.advance()
                continue

            if char == ")" and parens:
                while not isinstance(stack[-1], _OpenParen):
                    emitter.emit_binary_op(stack.pop())
                stack.pop()
                parens.pop()
                cursor.advance()
                continue

            # End of input, or a symbol that cannot follow an operand
            if parens:
                raise UnbalancedParenError(parens[-1], source)
            if char is not None:
                raise TrailingInputError(pos, source)
            break

        while stack:
            emitter.emit_binary_op(stack.pop())

        self.max_depth = deepest
        program = emitter.program()
        logger.debug(
            f"Compiled {source!r} with explicit stack: {len(program)} instructions, "
            f"depth {deepest}"
        )
        return program
