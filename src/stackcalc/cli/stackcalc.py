"""
stackcalc - Expression Compiler Command-Line Interface
======================================================

This module implements the `stackcalc` command. It compiles arithmetic
expressions to stack machine listings, runs listings, and evaluates
expressions end to end.

Usage Examples
--------------
Print the listing for an expression:
    $ stackcalc compile "2+4"

Write the listing to a file, with a header comment:
    $ stackcalc compile "7+3*(2-1)" --comments -o prog.lst

Compile the expression stored in a file:
    $ stackcalc compile -f expr.txt -o prog.lst

Run a listing, tracing each instruction:
    $ stackcalc run prog.lst --trace

Compile and run in one step:
    $ stackcalc eval "2/(7-3)"

Configuration
-------------
Defaults are read from STACKCALC_STRATEGY, STACKCALC_SKIP_WHITESPACE and
STACKCALC_MAX_NESTING; command-line options override them.

Exit Codes
----------
0 - Success
1 - Parse, listing or run-time error
2 - Invalid arguments or missing files
3 - Internal error
"""

import logging
from pathlib import Path
from typing import Optional

import click

from stackcalc import __version__
from stackcalc.cli.errors import handle_cli_exception
from stackcalc.compiler import STRATEGIES, Compiler, CompilerOptions
from stackcalc.emitter import render_listing
from stackcalc.instructions import Instruction, parse_listing
from stackcalc.vm import StackMachine

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores options common to every subcommand.
    """

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def build_options(
    strategy: Optional[str],
    skip_whitespace: bool,
    max_nesting: Optional[int],
    comments: bool = False,
) -> CompilerOptions:
    """Environment defaults overridden by command-line options."""
    options = CompilerOptions.from_env()
    if strategy is not None:
        options.strategy = strategy
    if skip_whitespace:
        options.skip_whitespace = True
    if max_nesting is not None:
        options.max_nesting = max_nesting
    options.output_comments = comments
    logger.debug(f"Compiler options: {options}")
    return options


def compiler_options(func):
    """Attach the options shared by `compile` and `eval`."""
    func = click.option(
        "--max-nesting",
        type=click.IntRange(min=1),
        default=None,
        help="Deepest parenthesis nesting accepted",
    )(func)
    func = click.option(
        "-w", "--skip-whitespace",
        is_flag=True,
        help="Ignore whitespace instead of rejecting it",
    )(func)
    func = click.option(
        "-s", "--strategy",
        type=click.Choice(sorted(STRATEGIES), case_sensitive=False),
        default=None,
        help="Parsing strategy (default: recursive)",
    )(func)
    return func


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="stackcalc")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Compile arithmetic expressions for a two-register stack machine.

    Expressions use single digits, + - * / and parentheses, with the
    usual precedence and left associativity.
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Compile Command
# =============================================================================

@main.command("compile")
@click.argument("expression", required=False)
@click.option(
    "-f", "--file", "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the expression from a file",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the listing to a file (default: stdout)",
)
@click.option(
    "-c", "--comments",
    is_flag=True,
    help="Add a header comment to the listing",
)
@compiler_options
@pass_context
def compile_command(
    ctx: Context,
    expression: Optional[str],
    input_file: Optional[Path],
    output: Optional[Path],
    comments: bool,
    strategy: Optional[str],
    skip_whitespace: bool,
    max_nesting: Optional[int],
) -> None:
    """
    Compile EXPRESSION to a stack machine listing.

    \b
    Examples:
        stackcalc compile "2+4"
        stackcalc compile "7+3*(2-1)" -o prog.lst
        stackcalc compile -f expr.txt --comments
    """
    if (expression is None) == (input_file is None):
        raise click.UsageError("give either EXPRESSION or -f/--file, not both")

    try:
        options = build_options(strategy, skip_whitespace, max_nesting, comments)
        compiler = Compiler(options)

        if input_file is not None:
            if ctx.verbose:
                click.echo(f"Compiling {input_file}...")
            result = compiler.compile_file(input_file)
        else:
            result = compiler.compile_source(expression)

        listing = render_listing(
            result.program,
            comments=options.output_comments,
            source=result.source,
        )

        if output is None:
            click.echo(listing, nl=False)
        else:
            output.write_text(listing, encoding="utf-8")
            click.echo(f"Compiled {result.source!r} -> {output}")

        if ctx.verbose:
            click.echo(f"Strategy: {result.strategy}")
            click.echo(f"Instructions: {result.instruction_count}")
            click.echo(f"Nesting depth: {result.max_depth}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# Run Command
# =============================================================================

@main.command()
@click.argument(
    "listing",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print each instruction with the stack before it runs",
)
@pass_context
def run(ctx: Context, listing: Path, trace: bool) -> None:
    """
    Execute a program LISTING and print its result.

    The listing format is the one written by `stackcalc compile`.
    """
    try:
        program = parse_listing(listing.read_text(encoding="utf-8"))
        machine = StackMachine()

        if trace:
            def show(pc: int, instr: Instruction) -> None:
                regs = machine.registers
                click.echo(
                    f"{pc:4d}  {str(instr):<10} a={regs['a']} b={regs['b']} "
                    f"stack={list(machine.stack)}"
                )
            machine.on_instruction = show

        result = machine.run(program)
        click.echo(str(result))

        if ctx.verbose:
            click.echo(f"Executed {machine.steps} instructions")
            click.echo(f"Max stack depth: {machine.max_stack_depth}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# Eval Command
# =============================================================================

@main.command("eval")
@click.argument("expression")
@compiler_options
@pass_context
def eval_command(
    ctx: Context,
    expression: str,
    strategy: Optional[str],
    skip_whitespace: bool,
    max_nesting: Optional[int],
) -> None:
    """
    Compile EXPRESSION, run it, and print the result.

    Division truncates toward zero, so "2/(7-3)" evaluates to 0.
    """
    try:
        options = build_options(strategy, skip_whitespace, max_nesting)
        result = Compiler(options).compile_source(expression)
        click.echo(str(StackMachine().run(result.program)))

        if ctx.verbose:
            click.echo(f"Instructions: {result.instruction_count}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


if __name__ == "__main__":
    main()
