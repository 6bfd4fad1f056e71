"""
calcengine - embeddable arithmetic and scientific expression engine.

Turns text such as ``"sqrt(9) + 5! / 2(3)^2"`` into a number, with
variables, constants, unary functions and a persistent ``ans``.

Usage:
    from calcengine import Computer

    computer = Computer.default()
    computer.eval("r = 2")
    computer.eval("pi * r^2")
"""

from calcengine._version import get_version
from calcengine.core.errors import (
    ComputeError,
    EvalError,
    ExpectedClosingParenthesis,
    ExpectedClosingPipe,
    ExpectedFactor,
    InputTooLong,
    InvalidFactorial,
    LexError,
    NumericError,
    ParseError,
    UnexpectedNumber,
    UnexpectedToken,
    UnrecognizedCharacter,
    UnrecognizedFunctionIdentifier,
    UnrecognizedIdentifier,
    UnsupportedOperation,
    VariableIsConstant,
)
from calcengine.core.expression_lang import (
    Binding,
    Computer,
    DecimalNumbers,
    FloatNumbers,
    FractionNumbers,
    NumberSystem,
    Token,
    TokenKind,
    compute,
    evaluate,
    parse,
    parse_no_preprocess,
    replace,
    tokenize,
)
from calcengine.core.settings import CalcConfig, build_computer, load_config

__version__ = get_version()

__all__ = [
    "__version__",
    # Pipeline
    "tokenize",
    "parse",
    "parse_no_preprocess",
    "compute",
    "evaluate",
    "replace",
    # State
    "Binding",
    "Computer",
    "CalcConfig",
    "build_computer",
    "load_config",
    # Number systems
    "NumberSystem",
    "FloatNumbers",
    "DecimalNumbers",
    "FractionNumbers",
    "Token",
    "TokenKind",
    # Errors
    "EvalError",
    "LexError",
    "ParseError",
    "ComputeError",
    "UnrecognizedCharacter",
    "InputTooLong",
    "ExpectedClosingParenthesis",
    "ExpectedClosingPipe",
    "ExpectedFactor",
    "UnexpectedNumber",
    "UnexpectedToken",
    "InvalidFactorial",
    "VariableIsConstant",
    "UnrecognizedIdentifier",
    "UnrecognizedFunctionIdentifier",
    "UnsupportedOperation",
    "NumericError",
]
