"""
asm6502 Command-Line Interface
==============================

This package provides the asm6502 command-line tool, a Click-based
front end to the assembler with listing and symbol file output.
"""

__all__ = ["asm"]
