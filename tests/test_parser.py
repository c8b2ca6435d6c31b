# =============================================================================
# test_parser.py - Expression Compiler Unit Tests
# =============================================================================
# Tests for both parsing strategies: recursive descent and explicit stack.
# Every test in the grammar and error classes runs against both, since
# they must produce identical programs and identical errors.
#
# Test coverage includes:
#   - Exact instruction sequences
#   - Operator precedence and left associativity
#   - Execution results compared with a reference evaluator
#   - Every error kind with its position
#   - Determinism and strategy equivalence on a random corpus
#   - Nesting limits
# =============================================================================

import ast
import random

import pytest

from stackcalc.errors import (
    NestingTooDeepError,
    ParseError,
    TrailingInputError,
    UnbalancedParenError,
    UnexpectedEndOfInputError,
    UnexpectedSymbolError,
)
from stackcalc.parser import DEFAULT_MAX_NESTING, RecursiveDescentParser
from stackcalc.shunting import ExplicitStackParser
from stackcalc.vm import execute, truncating_divide


# =============================================================================
# Helper Functions
# =============================================================================

def reference_eval(expr: str) -> int:
    """
    Evaluate an expression directly with Python's own parser.

    Python's grammar gives + - * / the same precedence and associativity
    as ours; only division is replaced by truncating integer division.
    """
    def walk(node):
        if isinstance(node, ast.Expression):
            return walk(node.body)
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.BinOp):
            left, right = walk(node.left), walk(node.right)
            if isinstance(node.op, ast.Add):
                return left + right
            if isinstance(node.op, ast.Sub):
                return left - right
            if isinstance(node.op, ast.Mult):
                return left * right
            if isinstance(node.op, ast.Div):
                return truncating_divide(left, right)
        raise AssertionError(f"unexpected node {node!r}")

    return walk(ast.parse(expr, mode="eval"))


def random_expression(rng: random.Random, depth: int = 0) -> str:
    """Build a random well-formed expression."""
    if depth > 4 or rng.random() < 0.3:
        return str(rng.randint(0, 9))
    if rng.random() < 0.25:
        return "(" + random_expression(rng, depth + 1) + ")"
    op = rng.choice("+-*/")
    return random_expression(rng, depth + 1) + op + random_expression(rng, depth + 1)


def divides_by_zero(expr: str) -> bool:
    try:
        reference_eval(expr)
    except ZeroDivisionError:
        return True
    return False


@pytest.fixture(params=["recursive", "explicit-stack"])
def parser(request):
    """Each test using this fixture runs once per strategy."""
    if request.param == "recursive":
        return RecursiveDescentParser()
    return ExplicitStackParser()


def compile_text(parser, source: str) -> list[str]:
    return parser.compile(source).to_text()


# =============================================================================
# Instruction Sequence Tests
# =============================================================================

class TestEmittedSequence:
    """Test the exact instructions produced."""

    def test_single_digit(self, parser):
        assert compile_text(parser, "7") == ["PUSH 7"]

    def test_addition(self, parser):
        """2+4 is the canonical example."""
        assert compile_text(parser, "2+4") == [
            "PUSH 2", "PUSH 4", "POP b", "POP a", "ADD a,b", "PUSH a",
        ]

    def test_each_operator_adds_four_instructions(self, parser):
        for expr in ["1", "1-2", "1*2/3", "(1+2)*(3-4)"]:
            digits = sum(c.isdigit() for c in expr)
            operators = sum(c in "+-*/" for c in expr)
            assert len(parser.compile(expr)) == digits + 4 * operators

    def test_precedence_order(self, parser):
        """Multiplication is emitted before the addition that contains it."""
        assert compile_text(parser, "2+3*4") == [
            "PUSH 2", "PUSH 3", "PUSH 4",
            "POP b", "POP a", "MUL a,b", "PUSH a",
            "POP b", "POP a", "ADD a,b", "PUSH a",
        ]

    def test_left_associativity(self, parser):
        """8-4-2 emits the first subtraction before pushing 2."""
        assert compile_text(parser, "8-4-2") == [
            "PUSH 8", "PUSH 4",
            "POP b", "POP a", "SUB a,b", "PUSH a",
            "PUSH 2",
            "POP b", "POP a", "SUB a,b", "PUSH a",
        ]

    def test_parentheses_override_precedence(self, parser):
        assert compile_text(parser, "(2+3)*4") == [
            "PUSH 2", "PUSH 3",
            "POP b", "POP a", "ADD a,b", "PUSH a",
            "PUSH 4",
            "POP b", "POP a", "MUL a,b", "PUSH a",
        ]

    def test_redundant_parentheses_emit_nothing(self, parser):
        assert compile_text(parser, "((5))") == ["PUSH 5"]


# =============================================================================
# Execution Tests
# =============================================================================

class TestEvaluation:
    """Test that compiled programs compute the right values."""

    @pytest.mark.parametrize("expr,expected", [
        ("2+4", 6),
        ("2/(7-3)", 0),
        ("7+3*(2-1)", 10),
        ("8-4-2", 2),
        ("8/4/2", 1),
        ("9-3*2", 3),
        ("(9-3)*2", 12),
        ("1-9", -8),
        ("(1-8)/2", -3),
        ("9*9*9*9", 6561),
        ("0", 0),
    ])
    def test_known_values(self, parser, expr, expected):
        assert execute(parser.compile(expr)) == expected

    def test_matches_reference_evaluator(self, parser):
        rng = random.Random(20261017)
        checked = 0
        while checked < 300:
            expr = random_expression(rng)
            if divides_by_zero(expr):
                continue
            assert execute(parser.compile(expr)) == reference_eval(expr), expr
            checked += 1


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test error kinds and positions."""

    def test_lone_open_paren(self, parser):
        with pytest.raises(UnbalancedParenError) as exc_info:
            parser.compile("(")
        assert exc_info.value.position == 0

    def test_dangling_operator(self, parser):
        with pytest.raises(UnexpectedEndOfInputError) as exc_info:
            parser.compile("2+")
        assert exc_info.value.position == 2

    def test_unmatched_close_paren(self, parser):
        with pytest.raises(TrailingInputError) as exc_info:
            parser.compile("2)")
        assert exc_info.value.position == 1

    def test_empty_input(self, parser):
        with pytest.raises(UnexpectedEndOfInputError) as exc_info:
            parser.compile("")
        assert exc_info.value.position == 0

    @pytest.mark.parametrize("expr,char,position", [
        ("+1", "+", 0),
        ("2+*3", "*", 2),
        ("x", "x", 0),
        ("()", ")", 1),
        ("(+1)", "+", 1),
        ("1+ 2", " ", 2),
    ])
    def test_unexpected_symbol(self, parser, expr, char, position):
        with pytest.raises(UnexpectedSymbolError) as exc_info:
            parser.compile(expr)
        assert exc_info.value.char == char
        assert exc_info.value.position == position

    @pytest.mark.parametrize("expr,position", [
        ("(2", 0),
        ("(2+3", 0),
        ("1+(2*(3", 5),
        ("((2)", 0),
        ("(2x", 0),
        ("(2(", 0),
        ("(1+", 0),
    ])
    def test_unbalanced_paren_reports_open_position(self, parser, expr, position):
        with pytest.raises(UnbalancedParenError) as exc_info:
            parser.compile(expr)
        assert exc_info.value.position == position

    @pytest.mark.parametrize("expr,position", [
        ("12", 1),
        ("(2))", 3),
        ("2(", 1),
        ("2 ", 1),
        ("3*4x", 3),
    ])
    def test_trailing_input(self, parser, expr, position):
        with pytest.raises(TrailingInputError) as exc_info:
            parser.compile(expr)
        assert exc_info.value.position == position

    def test_errors_are_parse_errors(self, parser):
        with pytest.raises(ParseError):
            parser.compile("1+")

    def test_error_message_points_at_position(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.compile("2+*3")
        lines = str(exc_info.value).splitlines()
        assert lines[0] == "error: unexpected symbol '*' at position 2"
        assert lines[1] == "    2+*3"
        assert lines[2] == "      ^"
        assert lines[3].startswith("hint:")

    @pytest.mark.parametrize("strategy", [RecursiveDescentParser, ExplicitStackParser])
    def test_error_caret_on_later_line(self, strategy):
        parser = strategy(skip_whitespace=True)
        with pytest.raises(ParseError) as exc_info:
            parser.compile("2+\n\t*")
        lines = str(exc_info.value).splitlines()
        assert lines[0] == "error: unexpected symbol '*' at position 4"
        assert lines[1] == "    \t*"
        assert lines[2] == "    \t^"


# =============================================================================
# Whitespace Tests
# =============================================================================

class TestWhitespace:
    """Test the optional whitespace skipping."""

    @pytest.mark.parametrize("strategy", [RecursiveDescentParser, ExplicitStackParser])
    def test_skipped_whitespace_compiles_like_dense_input(self, strategy):
        parser = strategy(skip_whitespace=True)
        assert parser.compile(" 7 + 3 * ( 2 - 1 ) ") == parser.compile("7+3*(2-1)")

    @pytest.mark.parametrize("strategy", [RecursiveDescentParser, ExplicitStackParser])
    def test_positions_refer_to_original_text(self, strategy):
        parser = strategy(skip_whitespace=True)
        with pytest.raises(UnexpectedEndOfInputError) as exc_info:
            parser.compile("2 +  ")
        assert exc_info.value.position == 5


# =============================================================================
# Determinism and Equivalence Tests
# =============================================================================

class TestDeterminism:
    """Test that compilation is deterministic and strategy-independent."""

    def test_same_input_same_output(self, parser):
        first = parser.compile("7+3*(2-1)")
        second = parser.compile("7+3*(2-1)")
        assert first == second
        assert first.to_listing() == second.to_listing()

    def test_same_input_same_error(self, parser):
        errors = []
        for _ in range(2):
            with pytest.raises(ParseError) as exc_info:
                parser.compile("1+(2*")
            errors.append(exc_info.value)
        assert errors[0] == errors[1]

    def test_strategies_agree_on_valid_input(self):
        rng = random.Random(7)
        recursive = RecursiveDescentParser()
        explicit = ExplicitStackParser()
        for _ in range(300):
            expr = random_expression(rng)
            assert recursive.compile(expr) == explicit.compile(expr), expr

    def test_strategies_agree_on_invalid_input(self):
        """Mangled expressions fail identically under both strategies."""
        rng = random.Random(11)
        recursive = RecursiveDescentParser()
        explicit = ExplicitStackParser()
        alphabet = "0123456789+-*/() x"
        for _ in range(500):
            length = rng.randint(0, 10)
            expr = "".join(rng.choice(alphabet) for _ in range(length))
            outcomes = []
            for parser in (recursive, explicit):
                try:
                    outcomes.append(parser.compile(expr))
                except ParseError as e:
                    outcomes.append(e)
            assert outcomes[0] == outcomes[1], expr


# =============================================================================
# Nesting Tests
# =============================================================================

class TestNesting:
    """Test nesting depth tracking and limits."""

    def test_max_depth_recorded(self, parser):
        parser.compile("(1+(2*(3)))-4")
        assert parser.max_depth == 3

    def test_configured_limit(self):
        for parser in (RecursiveDescentParser(max_nesting=2), ExplicitStackParser(max_nesting=2)):
            assert execute(parser.compile("((1))")) == 1
            with pytest.raises(NestingTooDeepError) as exc_info:
                parser.compile("(((1)))")
            assert exc_info.value.position == 2
            assert exc_info.value.limit == 2

    def test_recursive_default_limit(self):
        parser = RecursiveDescentParser()
        deep = "(" * (DEFAULT_MAX_NESTING + 1) + "1" + ")" * (DEFAULT_MAX_NESTING + 1)
        with pytest.raises(NestingTooDeepError):
            parser.compile(deep)

    def test_recursive_limit_above_interpreter_stack(self):
        """A large configured limit still ends in a parse error."""
        depth = 2000
        deep = "(" * depth + "1" + ")" * depth
        parser = RecursiveDescentParser(max_nesting=5000)
        with pytest.raises(NestingTooDeepError) as exc_info:
            parser.compile(deep)
        assert 0 < exc_info.value.position < depth
        assert exc_info.value.limit < depth

    def test_recursive_parser_usable_after_stack_limit(self):
        parser = RecursiveDescentParser(max_nesting=5000)
        with pytest.raises(NestingTooDeepError):
            parser.compile("(" * 2000 + "1" + ")" * 2000)
        assert execute(parser.compile("(2+4)")) == 6

    def test_explicit_stack_handles_deep_nesting(self):
        """Nesting far beyond the Python recursion limit still compiles."""
        depth = 5000
        deep = "(" * depth + "1+2" + ")" * depth
        parser = ExplicitStackParser()
        assert execute(parser.compile(deep)) == 3
        assert parser.max_depth == depth

    def test_explicit_stack_deep_unbalanced(self):
        depth = 5000
        with pytest.raises(UnbalancedParenError) as exc_info:
            ExplicitStackParser().compile("(" * depth + "1")
        assert exc_info.value.position == depth - 1
