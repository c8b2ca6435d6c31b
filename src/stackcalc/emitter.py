"""
Instruction Emitter
===================

Collects the instruction sequence produced while an expression is parsed.

The emitter is append-only: instructions are added in the order the
parser resolves subexpressions and are never removed or reordered. Every
binary operator expands to the same four instructions:

    POP b       ; right operand
    POP a       ; left operand
    <OP> a,b    ; a = a <OP> b
    PUSH a      ; result back on the stack
"""

from typing import Optional

from stackcalc.instructions import Instruction, Opcode, Program, Register


OPERATOR_OPCODES = {
    "+": Opcode.ADD,
    "-": Opcode.SUB,
    "*": Opcode.MUL,
    "/": Opcode.DIV,
}


def translate_operator(op_char: str) -> Opcode:
    """
    Map an operator character to its opcode.

    Only the four grammar operators are valid. Anything else means the
    parser called this with a character it should never have accepted.
    """
    opcode = OPERATOR_OPCODES.get(op_char)
    assert opcode is not None, f"no opcode for operator {op_char!r}"
    return opcode


class Emitter:
    """
    Append-only output buffer for one compile call.

    Example:
        >>> emitter = Emitter()
        >>> emitter.emit_push_digit("2")
        >>> emitter.emit_push_digit("4")
        >>> emitter.emit_binary_op("+")
        >>> [str(i) for i in emitter.program()]
        ['PUSH 2', 'PUSH 4', 'POP b', 'POP a', 'ADD a,b', 'PUSH a']
    """

    def __init__(self):
        self._output: list[Instruction] = []

    def emit(self, instruction: Instruction) -> None:
        """Append an instruction."""
        self._output.append(instruction)

    def emit_push_digit(self, char: str) -> None:
        """Emit PUSH for a single decimal digit character."""
        self.emit(Instruction.push_digit(int(char)))

    def emit_binary_op(self, op_char: str) -> None:
        """Emit the four-instruction sequence for a binary operator."""
        opcode = translate_operator(op_char)
        self.emit(Instruction.pop(Register.B))
        self.emit(Instruction.pop(Register.A))
        self.emit(Instruction.binary(opcode, Register.A, Register.B))
        self.emit(Instruction.push_register(Register.A))

    def program(self) -> Program:
        """Snapshot of everything emitted so far."""
        return Program(self._output)

    def __len__(self) -> int:
        return len(self._output)


# =============================================================================
# Listing Output
# =============================================================================

def render_listing(
    program: Program,
    comments: bool = False,
    source: Optional[str] = None,
) -> str:
    """
    Render a program as listing text.

    Args:
        program: Program to render
        comments: If True, prefix a header naming the source expression
        source: Source expression shown in the header

    Returns:
        Listing text, one canonical instruction per line, newline terminated
    """
    lines = []
    if comments:
        lines.append("; -----------------------------------------------------------------------------")
        if source is not None:
            lines.append(f"; Expression: {source}")
        lines.append(f"; Instructions: {len(program)}")
        lines.append("; -----------------------------------------------------------------------------")
    lines.extend(program.to_text())
    return "\n".join(lines) + "\n"
