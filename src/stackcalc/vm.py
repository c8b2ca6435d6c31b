"""
Two-Register Stack Machine
==========================

Reference executor for compiled programs. It defines what a program
means and is used by the test-suite and the `stackcalc run` command.

Machine Model
-------------
- A last-in-first-out value stack of Python ints
- Two scratch registers, a and b
- A program counter indexing the instruction sequence

Semantics:
    PUSH x      push digit x
    PUSH r      push the value of register r
    POP r       pop the top of stack into register r
    OP a,b      a = a OP b   (DIV truncates toward zero)

A program is complete when the last instruction has run; the result is
the single value left on the stack.

Example:
    >>> from stackcalc.vm import StackMachine
    >>> from stackcalc.compiler import compile_expression
    >>> vm = StackMachine()
    >>> vm.run(compile_expression("2+4"))
    6
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from stackcalc.errors import DivisionByZeroError, FinalStackError, StackUnderflowError
from stackcalc.instructions import Instruction, Opcode, Program, Register

logger = logging.getLogger(__name__)


def truncating_divide(left: int, right: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(left) // abs(right)
    if (left < 0) != (right < 0):
        return -quotient
    return quotient


_OPERATIONS: dict[Opcode, Callable[[int, int], int]] = {
    Opcode.ADD: lambda a, b: a + b,
    Opcode.SUB: lambda a, b: a - b,
    Opcode.MUL: lambda a, b: a * b,
    Opcode.DIV: truncating_divide,
}


@dataclass
class MachineState:
    """
    Complete machine state for snapshotting.

    Attributes:
        a, b: Register values
        pc: Index of the next instruction
        stack: Value stack, top last
    """
    a: int = 0
    b: int = 0
    pc: int = 0
    stack: tuple[int, ...] = ()


class StackMachine:
    """
    Executes stackcalc programs.

    Instrumentation:
        on_instruction(pc, instruction) is called before each instruction
        is executed, which is how `stackcalc run --trace` prints its trace.

    Attributes:
        max_stack_depth: Deepest stack seen since the last reset
        steps: Instructions executed since the last reset
    """

    def __init__(self):
        self.on_instruction: Optional[Callable[[int, Instruction], None]] = None
        self.reset()

    def reset(self) -> None:
        """Clear registers, stack and program counter."""
        self._registers = {Register.A: 0, Register.B: 0}
        self._stack: list[int] = []
        self._program = Program()
        self._pc = 0
        self.max_stack_depth = 0
        self.steps = 0

    # ========================================
    # State Access
    # ========================================

    @property
    def pc(self) -> int:
        return self._pc

    @property
    def registers(self) -> dict[str, int]:
        return {reg.value: value for reg, value in self._registers.items()}

    @property
    def stack(self) -> tuple[int, ...]:
        return tuple(self._stack)

    @property
    def halted(self) -> bool:
        return self._pc >= len(self._program)

    def get_state(self) -> MachineState:
        return MachineState(
            a=self._registers[Register.A],
            b=self._registers[Register.B],
            pc=self._pc,
            stack=tuple(self._stack),
        )

    # ========================================
    # Execution
    # ========================================

    def load(self, program: Program) -> None:
        """Reset the machine and load a program."""
        self.reset()
        self._program = program

    def step(self) -> None:
        """
        Execute one instruction.

        Raises:
            StackUnderflowError: POP from an empty stack
            DivisionByZeroError: DIV with b == 0
        """
        if self.halted:
            return

        pc = self._pc
        instr = self._program[pc]
        if self.on_instruction is not None:
            self.on_instruction(pc, instr)

        opcode = instr.opcode
        if opcode is Opcode.PUSH:
            operand = instr.operands[0]
            if isinstance(operand, Register):
                self._stack.append(self._registers[operand])
            else:
                self._stack.append(operand)
            self.max_stack_depth = max(self.max_stack_depth, len(self._stack))
        elif opcode is Opcode.POP:
            if not self._stack:
                raise StackUnderflowError("pop from empty stack", pc)
            self._registers[instr.operands[0]] = self._stack.pop()
        else:
            target, source = instr.operands
            right = self._registers[source]
            if opcode is Opcode.DIV and right == 0:
                raise DivisionByZeroError(pc)
            self._registers[target] = _OPERATIONS[opcode](self._registers[target], right)

        self._pc += 1
        self.steps += 1

    def run(self, program: Program) -> int:
        """
        Load and execute a program to completion.

        Args:
            program: Program to execute

        Returns:
            The single value left on the stack

        Raises:
            StackUnderflowError: On an empty pop
            FinalStackError: If the program does not leave exactly one value
                             on the stack
            DivisionByZeroError: On division by zero
        """
        self.load(program)
        while not self.halted:
            self.step()

        if len(self._stack) != 1:
            raise FinalStackError(len(self._stack))

        result = self._stack[-1]
        logger.debug(
            f"Executed {self.steps} instructions, max stack depth "
            f"{self.max_stack_depth}, result {result}"
        )
        return result


def execute(program: Program) -> int:
    """
    Convenience function to run a program on a fresh machine.

    Returns:
        The program result
    """
    return StackMachine().run(program)
