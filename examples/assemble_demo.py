#!/usr/bin/env python3
"""
asm6502 Library Demo
====================

This script demonstrates how to use the assembler from Python to:
1. Assemble a source file at a chosen origin
2. Inspect the generated bytes and symbol table
3. Print the listing
4. Handle assembly errors

Usage:
    python examples/assemble_demo.py
"""

from pathlib import Path

from asm6502 import Assembler, AssemblerError, assemble


def main():
    source_file = Path(__file__).with_name("countdown.asm")

    # ==========================================================================
    # 1. Assemble a file
    # ==========================================================================
    print(f"Assembling {source_file.name} at $0600...")
    asm = Assembler(origin=0x0600)
    code = asm.assemble_file(source_file)
    print(f"  {len(code)} bytes: {code.hex(' ')}")

    # ==========================================================================
    # 2. Symbols
    # ==========================================================================
    print("\nSymbols:")
    for name, address in asm.get_symbols().items():
        print(f"  {name:10s} ${address:04X}")

    # ==========================================================================
    # 3. Listing
    # ==========================================================================
    print()
    print(asm.get_listing())

    # ==========================================================================
    # 4. Errors
    # ==========================================================================
    print("\nAssembling a program with a typo...")
    try:
        assemble("loop:\n  DEX\n  BNE lop\n", filename="typo.asm")
    except AssemblerError as e:
        print(e)


if __name__ == "__main__":
    main()
