"""Syntax tree, types, values, type checker, pretty printer and interpreter for the Fun language."""

__version__ = "0.1.0"