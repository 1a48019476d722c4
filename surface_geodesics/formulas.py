"""
Formula text -> sympy expression -> surface function.

Formula format:
    %u, %v          surface parameters
    %pi, %e         constants
    %a ... %Z       single-letter user parameters (u, v and e are reserved);
                    unbound parameters evaluate to NaN
    ^ or **         exponentiation (right-associative)
    + - * / ( )     usual arithmetic, unary sign
    sin(...) etc.   sin cos tan asin acos atan sinh cosh tanh asinh acosh atanh
                    sqrt exp log abs

Example: "%r * sin(%u) * cos(%v)" with parameters {"r": 5}.

The text is tokenized and parsed by a small recursive-descent parser that
builds the sympy tree directly; user text is never handed to eval/sympify.
"""
import re
from typing import Dict, List, Mapping, Optional, Tuple

import sympy as sp
from sympy import Expr

from .logging import logger
from .surfaces import ParametricSurface, U, V, undefined_surface


class FormulaError(ValueError):
    """Malformed formula text."""
    def __init__(self, message: str, text: str = "", position: Optional[int] = None):
        self.text = text
        self.position = position
        if position is not None:
            message = f"{message} at position {position} in {text!r}"
        super().__init__(message)


FUNCTIONS = {
    'sin': sp.sin, 'cos': sp.cos, 'tan': sp.tan,
    'asin': sp.asin, 'acos': sp.acos, 'atan': sp.atan,
    'sinh': sp.sinh, 'cosh': sp.cosh, 'tanh': sp.tanh,
    'asinh': sp.asinh, 'acosh': sp.acosh, 'atanh': sp.atanh,
    'sqrt': sp.sqrt, 'exp': sp.exp, 'log': sp.log, 'abs': sp.Abs,
}

RESERVED = {'u', 'v', 'e'}

_PARAMETER_RE = re.compile(r'%([a-tw-zA-Z])')
_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<var>%(?:pi|[a-zA-Z]))
  | (?P<name>[A-Za-z_][A-Za-z_0-9]*)
  | (?P<op>\*\*|[-+*/^()])
""", re.VERBOSE)

Token = Tuple[str, str, int]  # (kind, text, position)


def find_parameters(text: str) -> List[str]:
    """User parameter letters used in text, unique, in order of appearance."""
    text = text.replace('%pi', '').replace('%e', '')
    seen: List[str] = []
    for name in _PARAMETER_RE.findall(text):
        if name not in seen:
            seen.append(name)
    return seen


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise FormulaError(f"Unexpected character {text[pos]!r}", text, pos)
        kind = m.lastgroup
        if kind != 'ws':
            value = m.group(kind)
            if kind == 'op' and value == '**':
                value = '^'
            tokens.append((kind, value, pos))
        pos = m.end()
    tokens.append(('end', '', len(text)))
    return tokens


class _Parser:
    """
    expr  := term (('+' | '-') term)*
    term  := unary (('*' | '/') unary)*
    unary := ('+' | '-') unary | power
    power := atom ('^' unary)?
    atom  := number | variable | function '(' expr ')' | '(' expr ')'
    """
    def __init__(self, text: str, parameters: Mapping[str, float]):
        self.text = text
        self.parameters = parameters
        self.tokens = tokenize(text)
        self.i = 0

    def peek(self) -> Token:
        return self.tokens[self.i]

    def advance(self) -> Token:
        tok = self.tokens[self.i]
        self.i += 1
        return tok

    def expect(self, value: str) -> Token:
        tok = self.advance()
        if tok[1] != value:
            found = tok[1] or 'end of formula'
            raise FormulaError(f"Expected {value!r}, found {found!r}", self.text, tok[2])
        return tok

    def parse(self) -> Expr:
        if self.peek()[0] == 'end':
            raise FormulaError("Empty formula", self.text, 0)
        expr = self.expr()
        tok = self.peek()
        if tok[0] != 'end':
            raise FormulaError(f"Unexpected {tok[1]!r}", self.text, tok[2])
        return expr

    def expr(self) -> Expr:
        left = self.term()
        while self.peek()[1] in ('+', '-'):
            op = self.advance()[1]
            right = self.term()
            left = left + right if op == '+' else left - right
        return left

    def term(self) -> Expr:
        left = self.unary()
        while self.peek()[1] in ('*', '/'):
            op = self.advance()[1]
            right = self.unary()
            left = left * right if op == '*' else left / right
        return left

    def unary(self) -> Expr:
        if self.peek()[1] in ('+', '-'):
            op = self.advance()[1]
            operand = self.unary()
            return operand if op == '+' else -operand
        return self.power()

    def power(self) -> Expr:
        base = self.atom()
        if self.peek()[1] == '^':
            self.advance()
            return base ** self.unary()
        return base

    def atom(self) -> Expr:
        kind, value, pos = self.advance()
        if kind == 'number':
            return sp.Integer(value) if value.isdigit() else sp.Float(value)
        if kind == 'var':
            return self.variable(value[1:], pos)
        if kind == 'name':
            func = FUNCTIONS.get(value)
            if func is None:
                raise FormulaError(f"Unknown function {value!r}", self.text, pos)
            self.expect('(')
            arg = self.expr()
            self.expect(')')
            return func(arg)
        if value == '(':
            inner = self.expr()
            self.expect(')')
            return inner
        found = value or 'end of formula'
        raise FormulaError(f"Unexpected {found!r}", self.text, pos)

    def variable(self, name: str, pos: int) -> Expr:
        if name == 'pi':
            return sp.pi
        if name == 'e':
            return sp.E
        if name == 'u':
            return U
        if name == 'v':
            return V
        value = self.parameters.get(name)
        if value is None:
            logger.debug(f"Unbound parameter %{name} in {self.text!r}; evaluating to NaN")
            return sp.nan
        return sp.Float(value)


def parse_formula(text: str, parameters: Optional[Mapping[str, float]] = None) -> Expr:
    """
    Parse formula text into a sympy expression in the symbols U, V with the
    parameter values substituted.

    Raises:
        FormulaError: if the text is not a valid formula.
    """
    expr = _Parser(text, parameters or {}).parse()
    if expr.has(sp.zoo):
        expr = expr.subs(sp.zoo, sp.nan)
    return expr


def surface_from_formulas(
    x: str,
    y: str,
    z: str,
    parameters: Optional[Mapping[str, float]] = None,
    u_range: Tuple[float, float] = (0.0, 1.0),
    v_range: Tuple[float, float] = (0.0, 1.0),
    name: str = "custom",
    strict: bool = False,
) -> ParametricSurface:
    """
    Build a ParametricSurface from three coordinate formulas.

    With strict=False a malformed formula yields a surface that returns the
    NaN sentinel everywhere; with strict=True the FormulaError propagates.
    """
    params: Dict[str, float] = dict(parameters or {})
    try:
        exprs = [parse_formula(text, params) for text in (x, y, z)]
    except FormulaError as exc:
        if strict:
            raise
        logger.warning(f"Surface '{name}' is undefined: {exc}")
        return undefined_surface(u_range, v_range, name)
    return ParametricSurface(exprs, u_range=u_range, v_range=v_range, name=name)


__all__ = [
    "FormulaError",
    "FUNCTIONS",
    "RESERVED",
    "find_parameters",
    "tokenize",
    "parse_formula",
    "surface_from_formulas",
]
