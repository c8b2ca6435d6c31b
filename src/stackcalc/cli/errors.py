"""
CLI Error Reporting
===================

Maps exceptions raised by the compiler, the listing decoder and the stack
machine to a message on stderr and a process exit code.

| Exception                      | Output prefix     | Exit code      |
|--------------------------------|-------------------|----------------|
| ParseError                     | (none)            | BUILD_ERROR    |
| ListingFormatError             | "Listing "        | BUILD_ERROR    |
| MachineError                   | "Runtime "        | BUILD_ERROR    |
| bad option / missing file      | "Error: "         | INVALID_ARGS   |
| anything else                  | "Internal error: "| INTERNAL_ERROR |

Package errors already start with "error:", so the prefix reads as
"Runtime error: division by zero (instruction 4)".
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Process exit codes shared by every stackcalc command."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Parse, listing, or machine error
    INVALID_ARGS = 2     # Invalid options or unreadable files
    INTERNAL_ERROR = 3   # Bug in stackcalc itself


def error_label(error: Exception) -> str:
    """
    Return the prefix shown before a package error's own message.

    Args:
        error: A StackCalcError instance

    Returns:
        "" for parse errors, otherwise "Listing " or "Runtime "
    """
    from stackcalc.errors import ListingFormatError, MachineError

    if isinstance(error, ListingFormatError):
        return "Listing "
    if isinstance(error, MachineError):
        return "Runtime "
    return ""


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception raised inside a command and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback of internal errors

    Raises:
        SystemExit: Always
    """
    from stackcalc.errors import StackCalcError

    if isinstance(error, StackCalcError):
        click.echo(f"{error_label(error)}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    # CompilerOptions rejects bad values with ValueError
    if isinstance(error, (click.BadParameter, ValueError, OSError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
