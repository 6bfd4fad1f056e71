"""
calcengine expression language.

Tokenizer, parser, tree rewriting, and computer for arithmetic and
scientific expressions.

Usage:
    from calcengine.core.expression_lang import Computer, parse, tokenize

    computer = Computer.default()
    expr = parse(tokenize("x = 2^10"))
    result = computer.compute(expr)
    # result == 1024.0
"""

from calcengine.core.expression_lang.computer import Binding, Computer, compute, evaluate
from calcengine.core.expression_lang.numbers import (
    DecimalNumbers,
    FloatNumbers,
    FractionNumbers,
    NumberSystem,
    get_number_system,
)
from calcengine.core.expression_lang.parser import parse, parse_no_preprocess, preprocess
from calcengine.core.expression_lang.rewrite import replace
from calcengine.core.expression_lang.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "Binding",
    "Computer",
    "DecimalNumbers",
    "FloatNumbers",
    "FractionNumbers",
    "NumberSystem",
    "Token",
    "TokenKind",
    "compute",
    "evaluate",
    "get_number_system",
    "parse",
    "parse_no_preprocess",
    "preprocess",
    "replace",
    "tokenize",
]
