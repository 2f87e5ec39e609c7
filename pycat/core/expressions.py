"""
Density functions rebuilt from lambda source text.

A reconstructable string carries an analytic density as lambda source, e.g.

    lambda x: 1/(0.5*sqrt(2*pi))*exp(-((x-2.0)**2/(2*0.5**2)))

Such text is never handed to ``eval``.  :class:`DensityExpression` parses it,
checks every node against a small whitelist and evaluates the body by walking
the tree.  Allowed elements:

    numbers                       int / float literals (evaluated as float)
    the lambda argument           e.g. ``x``
    constants                     pi, np.pi, np.e
    arithmetic                    + - * / **, unary + and -
    comparisons                   < <= > >= == != (one operator)
    conditional expressions       ``a if cond else b``
    calls                         exp log log10 sqrt abs, and np.<function>
                                  for the functions in NUMPY_FUNCTIONS

Anything else (attribute access beyond ``np.<name>``, subscripts,
comprehensions, keyword arguments, dunder names) raises
:class:`~pycat.core.errors.SerializationError` when the text is parsed.
"""

from __future__ import annotations

import ast
import operator
from typing import Any

import numpy as np

from pycat.core.errors import SerializationError


#: Functions callable by bare name.
MATH_FUNCTIONS: dict[str, Any] = {
    'exp':   np.exp,
    'log':   np.log,
    'log10': np.log10,
    'sqrt':  np.sqrt,
    'abs':   np.abs,
}

#: Constants usable by bare name.
MATH_CONSTANTS: dict[str, float] = {
    'pi': float(np.pi),
}

#: Names under which numpy may be referenced.
NUMPY_ALIASES = ('np', 'numpy')

#: numpy functions callable as ``np.<name>``.
NUMPY_FUNCTIONS = frozenset({
    'exp', 'expm1', 'log', 'log10', 'log1p', 'sqrt', 'abs', 'absolute',
    'sin', 'cos', 'tan', 'arcsin', 'arccos', 'arctan',
    'sinh', 'cosh', 'tanh', 'power', 'maximum', 'minimum', 'where',
})

#: numpy constants usable as ``np.<name>``.
NUMPY_CONSTANTS: dict[str, float] = {
    'pi': float(np.pi),
    'e':  float(np.e),
}

_BIN_OPS = {
    ast.Add:  operator.add,
    ast.Sub:  operator.sub,
    ast.Mult: operator.mul,
    ast.Div:  operator.truediv,
    ast.Pow:  operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_CMP_OPS = {
    ast.Lt:    operator.lt,
    ast.LtE:   operator.le,
    ast.Gt:    operator.gt,
    ast.GtE:   operator.ge,
    ast.Eq:    operator.eq,
    ast.NotEq: operator.ne,
}


# ──────────────────────────────────────────────────────────────────────────────
# Validation
# ──────────────────────────────────────────────────────────────────────────────

def _is_numpy(node: ast.AST) -> bool:
    return isinstance(node, ast.Name) and node.id in NUMPY_ALIASES


def _callee(node: ast.AST):
    """Function object for a whitelisted call target, or None."""
    if isinstance(node, ast.Name):
        return MATH_FUNCTIONS.get(node.id)
    if isinstance(node, ast.Attribute) and _is_numpy(node.value):
        if node.attr in NUMPY_FUNCTIONS:
            return getattr(np, node.attr)
    return None


def _check(node: ast.AST, arg: str) -> None:
    """Raise SerializationError unless every node below *node* is allowed."""
    if isinstance(node, ast.Constant):
        value = node.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SerializationError(f"Literal {value!r} is not a number")
        return

    if isinstance(node, ast.Name):
        if node.id != arg and node.id not in MATH_CONSTANTS:
            raise SerializationError(f"Unknown name '{node.id}' in density expression")
        return

    if isinstance(node, ast.Attribute):
        if not (_is_numpy(node.value) and node.attr in NUMPY_CONSTANTS):
            raise SerializationError(f"Attribute '{node.attr}' is not allowed")
        return

    if isinstance(node, ast.UnaryOp):
        if type(node.op) not in _UNARY_OPS:
            raise SerializationError(f"Unary operator not allowed: {type(node.op).__name__}")
        _check(node.operand, arg)
        return

    if isinstance(node, ast.BinOp):
        if type(node.op) not in _BIN_OPS:
            raise SerializationError(f"Binary operator not allowed: {type(node.op).__name__}")
        _check(node.left, arg)
        _check(node.right, arg)
        return

    if isinstance(node, ast.Compare):
        if len(node.ops) != 1 or type(node.ops[0]) not in _CMP_OPS:
            raise SerializationError("Only single comparisons are allowed")
        _check(node.left, arg)
        _check(node.comparators[0], arg)
        return

    if isinstance(node, ast.IfExp):
        for part in (node.test, node.body, node.orelse):
            _check(part, arg)
        return

    if isinstance(node, ast.Call):
        if _callee(node.func) is None:
            raise SerializationError(f"Call to '{ast.unparse(node.func)}' is not allowed")
        if node.keywords:
            raise SerializationError("Keyword arguments are not allowed")
        for a in node.args:
            if isinstance(a, ast.Starred):
                raise SerializationError("Star-args are not allowed")
            _check(a, arg)
        return

    raise SerializationError(f"Unsupported expression element: {type(node).__name__}")


# ──────────────────────────────────────────────────────────────────────────────
# Evaluation
# ──────────────────────────────────────────────────────────────────────────────

def _evaluate(node: ast.AST, arg: str, x):
    if isinstance(node, ast.Constant):
        # Integer literals are evaluated as float
        return float(node.value)

    if isinstance(node, ast.Name):
        if node.id == arg:
            return x
        return MATH_CONSTANTS[node.id]

    if isinstance(node, ast.Attribute):
        return NUMPY_CONSTANTS[node.attr]

    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPS[type(node.op)](_evaluate(node.operand, arg, x))

    if isinstance(node, ast.BinOp):
        left = _evaluate(node.left, arg, x)
        right = _evaluate(node.right, arg, x)
        return _BIN_OPS[type(node.op)](left, right)

    if isinstance(node, ast.Compare):
        left = _evaluate(node.left, arg, x)
        right = _evaluate(node.comparators[0], arg, x)
        return _CMP_OPS[type(node.ops[0])](left, right)

    if isinstance(node, ast.IfExp):
        if _evaluate(node.test, arg, x):
            return _evaluate(node.body, arg, x)
        return _evaluate(node.orelse, arg, x)

    # ast.Call; anything else was rejected by _check
    func = _callee(node.func)
    return func(*[_evaluate(a, arg, x) for a in node.args])


class DensityExpression:
    """
    One-argument density function parsed from lambda source.

    Args:
        source: Text of a lambda with exactly one positional argument.

    Raises:
        SerializationError: if the text is not such a lambda or uses
            anything outside the whitelist in the module docstring.
    """

    def __init__(self, source: str):
        try:
            tree = ast.parse(source.strip(), mode='eval')
        except SyntaxError as exc:
            raise SerializationError(f"Invalid density source: {exc}") from exc

        node = tree.body
        if not isinstance(node, ast.Lambda):
            raise SerializationError("Density source must be a lambda expression")
        args = node.args
        if (
            len(args.args) != 1
            or args.posonlyargs or args.kwonlyargs
            or args.vararg or args.kwarg or args.defaults
        ):
            raise SerializationError("Density lambda must take exactly one argument")

        self.arg = args.args[0].arg
        if self.arg.startswith('__'):
            raise SerializationError("Dunder names are not allowed")
        _check(node.body, self.arg)

        self.source = source
        self._body = node.body

    def __call__(self, x):
        return _evaluate(self._body, self.arg, x)

    def __repr__(self) -> str:
        return f"DensityExpression({self.source!r})"
