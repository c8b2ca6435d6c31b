"""
Stack Machine Instruction Set
=============================

This module defines the instruction model produced by the compiler and
consumed by the stack machine, plus the textual listing format used to
store programs.

Instruction Forms
-----------------
| Form              | Meaning                                   |
|-------------------|-------------------------------------------|
| PUSH <digit>      | push a literal digit                      |
| PUSH <reg>        | push the value of register a or b         |
| POP <reg>         | pop the top of stack into a register      |
| ADD a,b           | a = a + b                                 |
| SUB a,b           | a = a - b                                 |
| MUL a,b           | a = a * b                                 |
| DIV a,b           | a = a / b (truncating toward zero)        |

Listing Format
--------------
A listing holds one instruction per line in its canonical text form.
Blank lines and anything after ';' are ignored when reading it back, and
mnemonics and register names are case-insensitive:

    ; stackcalc listing
    PUSH 2
    PUSH 4
    POP b
    POP a
    ADD a,b
    PUSH a

The canonical text of an instruction never changes between runs, so
identical programs always render to identical listings.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union

from stackcalc.errors import ListingFormatError

logger = logging.getLogger(__name__)

DIGITS = "0123456789"


class Opcode(Enum):
    """Stack machine operations."""
    PUSH = "PUSH"
    POP = "POP"
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"

    @property
    def is_arithmetic(self) -> bool:
        return self in ARITHMETIC_OPCODES


class Register(Enum):
    """The two scratch registers."""
    A = "a"
    B = "b"


ARITHMETIC_OPCODES = frozenset({Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV})

Operand = Union[int, Register]


@dataclass(frozen=True)
class Instruction:
    """
    One stack machine operation.

    Instructions are immutable once created. Use the class-method
    constructors rather than building operand tuples by hand; they check
    that the operands fit the opcode.

    Attributes:
        opcode: The operation
        operands: Digit literal and/or registers, in source order
    """
    opcode: Opcode
    operands: tuple[Operand, ...] = ()

    @classmethod
    def push_digit(cls, value: int) -> "Instruction":
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 9:
            raise ValueError(f"PUSH literal must be a single digit, got {value!r}")
        return cls(Opcode.PUSH, (value,))

    @classmethod
    def push_register(cls, register: Register) -> "Instruction":
        return cls(Opcode.PUSH, (Register(register),))

    @classmethod
    def pop(cls, register: Register) -> "Instruction":
        return cls(Opcode.POP, (Register(register),))

    @classmethod
    def binary(
        cls,
        opcode: Opcode,
        target: Register = Register.A,
        source: Register = Register.B,
    ) -> "Instruction":
        if not opcode.is_arithmetic:
            raise ValueError(f"{opcode.value} is not an arithmetic opcode")
        return cls(opcode, (Register(target), Register(source)))

    def __str__(self) -> str:
        """Canonical text form, e.g. 'PUSH 2', 'POP b', 'ADD a,b'."""
        operands = ",".join(
            op.value if isinstance(op, Register) else str(op)
            for op in self.operands
        )
        if operands:
            return f"{self.opcode.value} {operands}"
        return self.opcode.value


class Program:
    """
    Immutable, ordered sequence of instructions.

    Programs compare equal when their instructions are equal, and can be
    used as dictionary keys.
    """

    __slots__ = ("_instructions",)

    def __init__(self, instructions=()):
        self._instructions: tuple[Instruction, ...] = tuple(instructions)

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return self._instructions

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __getitem__(self, index):
        return self._instructions[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Program):
            return self._instructions == other._instructions
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._instructions)

    def __repr__(self) -> str:
        return f"Program([{', '.join(str(i) for i in self._instructions)}])"

    def to_text(self) -> list[str]:
        """Canonical text of each instruction, in order."""
        return [str(instr) for instr in self._instructions]

    def to_listing(self) -> str:
        """Render as a listing with no comments."""
        from stackcalc.emitter import render_listing
        return render_listing(self)


# =============================================================================
# Listing Decoder
# =============================================================================

def parse_instruction(text: str, line: int = 1) -> Instruction:
    """
    Parse the canonical text of one instruction.

    Args:
        text: Instruction text without comments, e.g. "ADD a,b"
        line: Line number for error reporting

    Returns:
        The decoded Instruction

    Raises:
        ListingFormatError: If the text is not a valid instruction
    """
    parts = text.split(None, 1)
    if not parts:
        raise ListingFormatError("empty instruction", line, text)

    mnemonic = parts[0].upper()
    try:
        opcode = Opcode(mnemonic)
    except ValueError:
        raise ListingFormatError(f"unknown mnemonic '{parts[0]}'", line, text) from None

    operands = [op.strip() for op in parts[1].split(",")] if len(parts) > 1 else []

    if opcode.is_arithmetic:
        if len(operands) != 2:
            raise ListingFormatError(
                f"{opcode.value} takes two register operands", line, text
            )
        return Instruction.binary(
            opcode,
            _parse_register(operands[0], line, text),
            _parse_register(operands[1], line, text),
        )

    if len(operands) != 1:
        raise ListingFormatError(f"{opcode.value} takes one operand", line, text)
    operand = operands[0]

    if opcode is Opcode.POP:
        return Instruction.pop(_parse_register(operand, line, text))

    # PUSH takes either a digit or a register
    if len(operand) == 1 and operand in DIGITS:
        return Instruction.push_digit(int(operand))
    return Instruction.push_register(_parse_register(operand, line, text))


def _parse_register(text: str, line: int, source_line: str) -> Register:
    try:
        return Register(text.lower())
    except ValueError:
        raise ListingFormatError(f"invalid register '{text}'", line, source_line) from None


def parse_listing(text: str) -> Program:
    """
    Read a program back from its listing text.

    Args:
        text: Listing text as written by render_listing()

    Returns:
        The decoded Program

    Raises:
        ListingFormatError: On the first malformed line
    """
    instructions = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        code = raw.split(";", 1)[0].strip()
        if not code:
            continue
        instructions.append(parse_instruction(code, line_no))

    logger.debug(f"Decoded listing: {len(instructions)} instructions")
    return Program(instructions)
