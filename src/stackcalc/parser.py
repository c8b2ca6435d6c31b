"""
Recursive Descent Expression Parser
===================================

This module compiles single-digit infix arithmetic into stack machine
instructions. Each grammar level is one method, and instructions are
emitted as each subexpression resolves; no syntax tree is built.

Expression Grammar
------------------
Precedence is encoded by nesting (from lowest to highest):

    exp    -> term (('+' | '-') term)*
    term   -> factor (('*' | '/') factor)*
    factor -> digit | '(' exp ')'

The loops in exp and term emit each operator as soon as its right
operand is parsed, which makes equal-precedence operators
left-associative: 8-4-2 compiles as (8-4)-2.

Error Reporting
---------------
The first grammar violation aborts the compile:

- factor expected, neither digit nor '(' found: UnexpectedSymbolError
- factor expected at end of input: UnbalancedParenError for the innermost
  open '(' if there is one, otherwise UnexpectedEndOfInputError
- group not closed by ')': UnbalancedParenError at the '(' position
- characters after the complete expression: TrailingInputError

Example Usage
-------------
>>> from stackcalc.parser import RecursiveDescentParser
>>> program = RecursiveDescentParser().compile("2+4")
>>> [str(i) for i in program]
['PUSH 2', 'PUSH 4', 'POP b', 'POP a', 'ADD a,b', 'PUSH a']
"""

import logging
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

ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/")

# Each nesting level costs three Python frames (exp, term, factor)
DEFAULT_MAX_NESTING = 200


class RecursiveDescentParser:
    """
    Compiles expressions by recursive descent.

    A parser object may be reused; every compile() call creates its own
    Cursor and Emitter and keeps nothing afterwards except the statistics
    of the last call.

    Attributes:
        max_nesting: Deepest parenthesis nesting accepted
        skip_whitespace: Step over whitespace instead of rejecting it
        max_depth: Deepest nesting seen by the last successful compile
    """

    def __init__(
        self,
        skip_whitespace: bool = False,
        max_nesting: Optional[int] = None,
    ):
        self.skip_whitespace = skip_whitespace
        self.max_nesting = DEFAULT_MAX_NESTING if max_nesting is None else max_nesting
        self.max_depth = 0

    # =========================================================================
    # Main Interface
    # =========================================================================

    def compile(self, source: str) -> Program:
        """
        Compile an expression.

        Args:
            source: Expression text

        Returns:
            The instruction sequence

        Raises:
            ParseError: On the first grammar violation
            NestingTooDeepError: If nesting exceeds max_nesting, or exceeds
                                 what the interpreter stack allows when
                                 max_nesting is set higher than that
        """
        self._source = source
        self._cursor = Cursor(source, skip_whitespace=self.skip_whitespace)
        self._emitter = Emitter()
        self._open_parens: list[int] = []
        self._deepest = 0

        try:
            self._parse_exp()
        except RecursionError:
            # Configured limit is above what the interpreter stack can hold
            position = self._open_parens[-1] if self._open_parens else 0
            raise NestingTooDeepError(
                position, max(len(self._open_parens) - 1, 0), source
            ) from None

        if not self._cursor.at_end:
            raise TrailingInputError(self._cursor.position, source)

        self.max_depth = self._deepest
        program = self._emitter.program()
        logger.debug(
            f"Compiled {source!r}: {len(program)} instructions, depth {self._deepest}"
        )
        return program

    # =========================================================================
    # Grammar Procedures
    # =========================================================================

    def _parse_exp(self) -> None:
        """exp -> term (('+' | '-') term)*"""
        self._parse_term()

        while self._cursor.peek() in ADDITIVE_OPERATORS:
            op = self._cursor.peek()
            self._cursor.advance()
            self._parse_term()
            self._emitter.emit_binary_op(op)

    def _parse_term(self) -> None:
        """term -> factor (('*' | '/') factor)*"""
        self._parse_factor()

        while self._cursor.peek() in MULTIPLICATIVE_OPERATORS:
            op = self._cursor.peek()
            self._cursor.advance()
            self._parse_factor()
            self._emitter.emit_binary_op(op)

    def _parse_factor(self) -> None:
        """factor -> digit | '(' exp ')'"""
        char = self._cursor.peek()
        pos = self._cursor.position

        if char is None:
            if self._open_parens:
                raise UnbalancedParenError(self._open_parens[-1], self._source)
            raise UnexpectedEndOfInputError(pos, self._source)

        if char in DIGITS:
            self._cursor.advance()
            self._emitter.emit_push_digit(char)
            return

        if char == "(":
            if len(self._open_parens) >= self.max_nesting:
                raise NestingTooDeepError(pos, self.max_nesting, self._source)
            self._open_parens.append(pos)
            self._deepest = max(self._deepest, len(self._open_parens))
            self._cursor.advance()

            self._parse_exp()

            if self._cursor.peek() != ")":
                raise UnbalancedParenError(pos, self._source)
            self._cursor.advance()
            self._open_parens.pop()
            return

        raise UnexpectedSymbolError(char, pos, self._source)
