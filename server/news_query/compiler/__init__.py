"""
Expression Compiler

Applies operator-priority rules to a token forest and produces the single
boolean tree used by every search, alert and filter caller.

Usage:
    from news_query.compiler import ExpressionCompiler

    compiler = ExpressionCompiler()
    root = compiler.compile(tokens, OperatorPriority.BOOLEAN)
"""
from .compiler import ExpressionCompiler, TokenInput, as_forest
from .precedence import BINDINGS, bind

__all__ = [
    "BINDINGS",
    "ExpressionCompiler",
    "TokenInput",
    "as_forest",
    "bind",
]
