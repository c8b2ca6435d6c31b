"""
stackcalc Command-Line Interface
================================

This package provides the `stackcalc` command, a Click-based CLI with
the subcommands:

- **compile**: compile an expression to a program listing
- **run**: execute a program listing on the stack machine
- **eval**: compile and execute an expression
"""

__all__ = ["stackcalc"]
