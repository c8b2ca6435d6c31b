"""
stackcalc Compiler Main Module
==============================

This module provides the main compiler interface. It selects a parsing
strategy and packages the result:

    Source → Cursor → Parser (+ Emitter) → Program

Usage
-----
Command line:
    $ stackcalc compile "7+3*(2-1)"

Programmatic:
    >>> from stackcalc import compile_expression, execute
    >>> program = compile_expression("7+3*(2-1)")
    >>> execute(program)
    10

Strategies
----------
- **recursive** (default): one method per grammar level. Nesting depth is
  limited (200 levels unless configured) so deep input raises
  NestingTooDeepError instead of exhausting the Python stack.
- **explicit-stack**: shunting-yard with an owned operator stack. Same
  output and errors, no recursion, no nesting limit unless configured.

Configuration
-------------
Options come from CompilerOptions, either built directly or read from
the environment with CompilerOptions.from_env():

    STACKCALC_STRATEGY         "recursive" or "explicit-stack"
    STACKCALC_SKIP_WHITESPACE  "1"/"true"/"yes" to step over whitespace
    STACKCALC_MAX_NESTING      positive integer
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from stackcalc.instructions import Program
from stackcalc.parser import RecursiveDescentParser
from stackcalc.shunting import ExplicitStackParser

logger = logging.getLogger(__name__)

STRATEGY_RECURSIVE = "recursive"
STRATEGY_EXPLICIT_STACK = "explicit-stack"

STRATEGIES = {
    STRATEGY_RECURSIVE: RecursiveDescentParser,
    STRATEGY_EXPLICIT_STACK: ExplicitStackParser,
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        strategy: Parsing strategy, "recursive" or "explicit-stack"
        skip_whitespace: If True, whitespace between symbols is ignored.
                         If False (default), whitespace is rejected like any
                         other unexpected symbol.
        max_nesting: Deepest parenthesis nesting accepted. None means the
                     strategy default (200 for recursive, unlimited for
                     explicit-stack).
        output_comments: Add a header comment to rendered listings
    """
    strategy: str = STRATEGY_RECURSIVE
    skip_whitespace: bool = False
    max_nesting: Optional[int] = None
    output_comments: bool = False

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            choices = ", ".join(sorted(STRATEGIES))
            raise ValueError(f"unknown strategy '{self.strategy}' (expected one of: {choices})")
        if self.max_nesting is not None and self.max_nesting < 1:
            raise ValueError(f"max_nesting must be at least 1, got {self.max_nesting}")

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Invalid values are logged and ignored, leaving the default.

        Returns:
            CompilerOptions with values from the environment
        """
        options = cls()

        if strategy := os.environ.get("STACKCALC_STRATEGY"):
            strategy = strategy.strip().lower()
            if strategy in STRATEGIES:
                options.strategy = strategy
            else:
                logger.warning(f"Ignoring invalid STACKCALC_STRATEGY: {strategy}")

        if (skip := os.environ.get("STACKCALC_SKIP_WHITESPACE")) is not None:
            value = skip.strip().lower()
            if value in _TRUE_VALUES:
                options.skip_whitespace = True
            elif value in _FALSE_VALUES:
                options.skip_whitespace = False
            else:
                logger.warning(f"Ignoring invalid STACKCALC_SKIP_WHITESPACE: {skip}")

        if nesting := os.environ.get("STACKCALC_MAX_NESTING"):
            try:
                limit = int(nesting)
            except ValueError:
                limit = 0
            if limit >= 1:
                options.max_nesting = limit
            else:
                logger.warning(f"Ignoring invalid STACKCALC_MAX_NESTING: {nesting}")

        return options


@dataclass
class CompilerResult:
    """
    Result of compiling one expression.

    Attributes:
        source: The compiled expression
        program: Emitted instructions
        strategy: Strategy that produced the program
        max_depth: Deepest parenthesis nesting in the source
    """
    source: str
    program: Program
    strategy: str
    max_depth: int = 0

    @property
    def instruction_count(self) -> int:
        return len(self.program)


class Compiler:
    """
    stackcalc compiler.

    Example:
        compiler = Compiler(CompilerOptions(strategy="explicit-stack"))
        result = compiler.compile_source("2/(7-3)")
        print(result.program.to_listing())

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def _make_parser(self):
        parser_class = STRATEGIES[self.options.strategy]
        return parser_class(
            skip_whitespace=self.options.skip_whitespace,
            max_nesting=self.options.max_nesting,
        )

    def compile_source(self, source: str) -> CompilerResult:
        """
        Compile an expression.

        Args:
            source: Expression text

        Returns:
            CompilerResult with the program and statistics

        Raises:
            ParseError: If the expression is malformed
        """
        parser = self._make_parser()
        logger.debug(f"Compiling {source!r} ({self.options.strategy})")
        program = parser.compile(source)
        return CompilerResult(
            source=source,
            program=program,
            strategy=self.options.strategy,
            max_depth=parser.max_depth,
        )

    def compile_file(self, filepath: Union[str, Path]) -> CompilerResult:
        """
        Compile the expression stored in a file.

        Trailing line terminators are removed before compiling.

        Raises:
            ParseError: If the expression is malformed
            FileNotFoundError: If the file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8").rstrip("\r\n")
        return self.compile_source(source)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_expression(source: str, options: Optional[CompilerOptions] = None) -> Program:
    """
    Compile an expression to a stack machine program.

    Args:
        source: Expression text, e.g. "7+3*(2-1)"
        options: Compiler options (defaults if None)

    Returns:
        The emitted Program

    Raises:
        ParseError: If the expression is malformed
    """
    return Compiler(options).compile_source(source).program
