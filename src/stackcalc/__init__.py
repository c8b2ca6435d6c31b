"""
stackcalc - Arithmetic Expression Compiler for a Stack Machine
==============================================================

This package translates infix arithmetic over single digits into programs
for a small two-register stack machine, and can run those programs.

Main Components
---------------
- **cursor**: read-only scanning over the source text
- **parser**: recursive descent compiler (exp / term / factor)
- **shunting**: explicit-stack compiler with identical output
- **emitter**: append-only instruction output and listing rendering
- **instructions**: instruction model and listing decoder
- **vm**: reference stack machine
- **errors**: exception hierarchy

Quick Start
-----------
    >>> from stackcalc import compile_expression, execute
    >>> program = compile_expression("2+4")
    >>> print(program.to_listing(), end="")
    PUSH 2
    PUSH 4
    POP b
    POP a
    ADD a,b
    PUSH a
    >>> execute(program)
    6

Or use the command-line tool:
    $ stackcalc compile "2/(7-3)" -o prog.lst
    $ stackcalc run prog.lst
    $ stackcalc eval "7+3*(2-1)"
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from stackcalc.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_expression,
)
from stackcalc.cursor import Cursor
from stackcalc.emitter import Emitter, render_listing, translate_operator
from stackcalc.errors import (
    StackCalcError,
    ParseError,
    UnexpectedSymbolError,
    UnbalancedParenError,
    UnexpectedEndOfInputError,
    TrailingInputError,
    NestingTooDeepError,
    ListingFormatError,
    MachineError,
    StackUnderflowError,
    FinalStackError,
    DivisionByZeroError,
)
from stackcalc.instructions import (
    Instruction,
    Opcode,
    Program,
    Register,
    parse_listing,
)
from stackcalc.parser import RecursiveDescentParser
from stackcalc.shunting import ExplicitStackParser
from stackcalc.vm import StackMachine, execute

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_expression",
    "RecursiveDescentParser",
    "ExplicitStackParser",
    "Cursor",
    # Output
    "Emitter",
    "render_listing",
    "translate_operator",
    "Instruction",
    "Opcode",
    "Program",
    "Register",
    "parse_listing",
    # Execution
    "StackMachine",
    "execute",
    # Exception hierarchy
    "StackCalcError",
    "ParseError",
    "UnexpectedSymbolError",
    "UnbalancedParenError",
    "UnexpectedEndOfInputError",
    "TrailingInputError",
    "NestingTooDeepError",
    "ListingFormatError",
    "MachineError",
    "StackUnderflowError",
    "FinalStackError",
    "DivisionByZeroError",
]
