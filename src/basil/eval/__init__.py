"""Evaluator helper modules for the Basil runtime."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "expr",
    "fn",
    "imports",
    "loops",
]
