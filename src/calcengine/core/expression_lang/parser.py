"""
Recursive descent parser for calcengine expressions.

Grammar (precedence low to high):
    and_expr        → or_expr ("and" or_expr)*
    or_expr         → bool_atom ("or" bool_atom)*
    bool_atom       → "true" | "false" | "!" bool_atom | comparison
    comparison      → addition (comp_op addition)*
    addition        → multiply (("+"|"-") multiply)*
    multiply        → paren_multiply (("*"|"/") paren_multiply)*
    paren_multiply  → power ("(" addition ")" ("^" factorial)*)*
    power           → factorial ("^" factorial)*
    factorial       → factor "!"?
    factor          → "(" addition ")" | "|" addition "|" | identifier
                    | "-" factor | NUMBER
    identifier      → IDENT "(" addition ")"       function call
                    | IDENT "|" addition "|"       absolute value (IDENT dropped)
                    | IDENT NUMBER                 function call on a literal
                    | IDENT factor                 function call, when factor starts with IDENT
                    | IDENT "=" addition           assignment
                    | IDENT                        variable reference

Note that "and" binds looser than "or", and "^" folds left to right.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from calcengine.core.errors import (
    ExpectedClosingParenthesis,
    ExpectedClosingPipe,
    ExpectedFactor,
    UnexpectedNumber,
    UnexpectedToken,
)
from calcengine.core.expression_lang.tokenizer import Token, TokenKind
from calcengine.core.ir.expressions import (
    Abs,
    ArithOp,
    Assignment,
    BinCmp,
    BinOp,
    Bool,
    BoolNot,
    BoolOp,
    CmpOp,
    Constant,
    Expr,
    Factorial,
    Function,
    Identifier,
    LogicOp,
    Neg,
    Pow,
)

logger = logging.getLogger(__name__)

_COMPARISONS: dict[TokenKind, CmpOp] = {
    TokenKind.ASSIGN: CmpOp.EQ,
    TokenKind.EQ: CmpOp.EQ,
    TokenKind.NE: CmpOp.NE,
    TokenKind.LT: CmpOp.LT,
    TokenKind.GT: CmpOp.GT,
    TokenKind.LE: CmpOp.LE,
    TokenKind.GE: CmpOp.GE,
}


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != TokenKind.EOF:
            end = self.tokens[-1].pos + len(self.tokens[-1].text) if self.tokens else 0
            self.tokens.append(Token(TokenKind.EOF, "", end))
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def remaining(self) -> list[Token]:
        """Unconsumed tokens, excluding EOF."""
        return [t for t in self.tokens[self.pos :] if t.kind != TokenKind.EOF]

    def _close_paren(self) -> None:
        if not self.match(TokenKind.RPAREN):
            raise ExpectedClosingParenthesis(self.current.pos)

    def _close_pipe(self) -> None:
        if not self.match(TokenKind.PIPE):
            raise ExpectedClosingPipe(self.current.pos)

    # -- Grammar rules --

    def parse_and_expr(self) -> Expr:
        """or_expr ("and" or_expr)*"""
        left = self.parse_or_expr()
        while self.match(TokenKind.AND):
            right = self.parse_or_expr()
            left = BoolOp(op=LogicOp.AND, left=left, right=right)
        return left

    def parse_or_expr(self) -> Expr:
        """bool_atom ("or" bool_atom)*"""
        left = self.parse_bool_atom()
        while self.match(TokenKind.OR):
            right = self.parse_bool_atom()
            left = BoolOp(op=LogicOp.OR, left=left, right=right)
        return left

    def parse_bool_atom(self) -> Expr:
        """'true' | 'false' | '!' bool_atom | comparison"""
        if self.match(TokenKind.TRUE):
            return Bool(value=True)
        if self.match(TokenKind.FALSE):
            return Bool(value=False)
        if self.match(TokenKind.BANG):
            return BoolNot(expr=self.parse_bool_atom())
        return self.parse_comparison()

    def parse_comparison(self) -> Expr:
        """addition (comp_op addition)*"""
        left = self.parse_addition()
        while self.current.kind in _COMPARISONS:
            op = _COMPARISONS[self.advance().kind]
            right = self.parse_addition()
            left = BinCmp(op=op, left=left, right=right)
        return left

    def parse_addition(self) -> Expr:
        """multiply (('+' | '-') multiply)*"""
        left = self.parse_multiply()
        while self.current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            op = ArithOp.ADD if self.advance().kind == TokenKind.PLUS else ArithOp.SUB
            right = self.parse_multiply()
            left = BinOp(op=op, left=left, right=right)
        return left

    def parse_multiply(self) -> Expr:
        """paren_multiply (('*' | '/') paren_multiply)*"""
        left = self.parse_paren_multiply()
        while self.current.kind in (TokenKind.STAR, TokenKind.SLASH):
            op = ArithOp.MUL if self.advance().kind == TokenKind.STAR else ArithOp.DIV
            right = self.parse_paren_multiply()
            left = BinOp(op=op, left=left, right=right)
        return left

    def parse_paren_multiply(self) -> Expr:
        """power ('(' addition ')' ('^' factorial)*)*

        ``2(3)`` is ``2 * 3``; an exponent directly after the parenthesis
        applies to the parenthesized operand only, so ``2(3)^2`` is ``2 * 9``.
        """
        left = self.parse_power()
        while self.match(TokenKind.LPAREN):
            inner = self.parse_addition()
            self._close_paren()
            while self.match(TokenKind.CARET):
                inner = Pow(base=inner, exponent=self.parse_factorial())
            left = BinOp(op=ArithOp.MUL, left=left, right=inner)
        return left

    def parse_power(self) -> Expr:
        """factorial ('^' factorial)*"""
        left = self.parse_factorial()
        while self.match(TokenKind.CARET):
            left = Pow(base=left, exponent=self.parse_factorial())
        return left

    def parse_factorial(self) -> Expr:
        """factor '!'?"""
        expr = self.parse_factor()
        if self.match(TokenKind.BANG):
            return Factorial(expr=expr)
        return expr

    def parse_factor(self) -> Expr:
        """'(' addition ')' | '|' addition '|' | identifier | '-' factor | NUMBER"""
        tok = self.advance()

        # Parenthesized expression
        if tok.kind == TokenKind.LPAREN:
            expr = self.parse_addition()
            self._close_paren()
            return expr

        # Absolute value
        if tok.kind == TokenKind.PIPE:
            expr = self.parse_addition()
            self._close_pipe()
            return Abs(expr=expr)

        if tok.kind == TokenKind.IDENT:
            return self._parse_identifier(tok)

        # Unary minus binds to the next factor only: -2^2 is (-2)^2
        if tok.kind == TokenKind.MINUS:
            return Neg(expr=self.parse_factor())

        if tok.kind == TokenKind.NUMBER:
            return Constant(value=tok.number)

        raise ExpectedFactor(None if tok.kind == TokenKind.EOF else tok)

    def _parse_identifier(self, name_tok: Token) -> Expr:
        """Decide what an identifier means from the token after it."""
        name = name_tok.text
        nxt = self.current

        if nxt.kind == TokenKind.LPAREN:
            self.advance()
            arg = self.parse_addition()
            self._close_paren()
            return Function(name=name, arg=arg)

        if nxt.kind == TokenKind.PIPE:
            self.advance()
            expr = self.parse_addition()
            self._close_pipe()
            logger.debug("Identifier %r before '|' dropped in favour of abs value", name)
            return Abs(expr=expr)

        if nxt.kind == TokenKind.NUMBER:
            self.advance()
            return Function(name=name, arg=Constant(value=nxt.number))

        # sin cos x → sin(cos(x))
        if nxt.kind == TokenKind.IDENT:
            return Function(name=name, arg=self.parse_factor())

        if nxt.kind == TokenKind.ASSIGN:
            self.advance()
            return Assignment(name=name, expr=self.parse_addition())

        return Identifier(name=name)


def preprocess(tokens: Sequence[Token]) -> None:
    """Reject token sequences the grammar cannot resolve unambiguously.

    A number directly followed by an identifier (``2x``) could mean
    ``2 * x`` or be a typo, so it is refused instead of guessed.

    Raises:
        UnexpectedNumber: Carrying the identifier token after the number.
    """
    for tok, nxt in zip(tokens, tokens[1:]):
        if tok.kind == TokenKind.NUMBER and nxt.kind == TokenKind.IDENT:
            raise UnexpectedNumber(nxt)


def parse(tokens: Sequence[Token]) -> Expr:
    """Parse a token sequence into an expression tree.

    Args:
        tokens: Output of ``tokenize``; a trailing EOF token is optional.

    Returns:
        Parsed expression AST.

    Raises:
        ParseError: If the tokens are ambiguous, malformed, or not fully
            consumed.
    """
    preprocess(tokens)
    return parse_no_preprocess(tokens)


def parse_no_preprocess(tokens: Sequence[Token]) -> Expr:
    """Same as ``parse`` but without the ``2x`` ambiguity check.

    Useful when the caller validates tokens itself.
    """
    parser = _Parser(tokens)
    expr = parser.parse_and_expr()

    # Ensure all tokens consumed
    trailing = parser.remaining()
    if trailing:
        raise UnexpectedToken(expr, trailing)

    return expr
