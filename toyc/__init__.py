"""Lexer, syntax tree, LLVM-style IR, IR builder and IR parser for ToyC."""

__version__ = "0.1.0"
__all__ = ["ast", "ir", "ir_builder", "ir_parser", "lexer"]