"""
Density representations for size distributions.

A distribution's density is stored as one of three variants:

  * ``ExplicitDensity``: a vector aligned index-for-index with the pivots.
  * ``ParametricDensity``: a named family (``normal`` / ``lognormal``) with
    parameters μ and σ, evaluated natively with numpy.
  * ``RawDensity``: an arbitrary one-argument callable.

The parametric families are

    normal:     f(x) = 1/(σ·√(2π)) · exp(−(x−μ)² / (2σ²))
    lognormal:  f(x) = 1/(x·σ)    · exp(−(ln x − μ)² / (2σ²)),   f(x ≤ 0) = 0

Note that the log-normal form carries no √(2π) factor; it is kept as used by
the Crystallisation Analysis Toolbox so that moments agree with it.

:func:`resolve_density` turns whatever a caller hands to
``Distribution.set_density`` into one of these variants (or rejects it).
"""

from __future__ import annotations

import ast
import inspect
import logging
import textwrap
from dataclasses import dataclass, field
from types import CodeType
from typing import Callable, Optional

import numpy as np

from pycat.core.errors import SerializationError
from pycat.core.expressions import DensityExpression
from pycat.core.grids import as_vector

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Parametric families
# ──────────────────────────────────────────────────────────────────────────────

def _normal(x: np.ndarray, mu: float, sigma: float) -> np.ndarray:
    return 1.0 / (sigma * np.sqrt(2.0 * np.pi)) * np.exp(-((x - mu) ** 2 / (2.0 * sigma ** 2)))


def _lognormal(x: np.ndarray, mu: float, sigma: float) -> np.ndarray:
    positive = x > 0
    x_safe = np.where(positive, x, 1.0)
    val = 1.0 / (x_safe * sigma) * np.exp(-((np.log(x_safe) - mu) ** 2 / (2.0 * sigma ** 2)))
    return np.where(positive, val, 0.0)


#: Registry of parametric families: kind → (evaluator, lambda source template).
#: The templates are what the reconstructable string shows for the family.
_FAMILY_REGISTRY: dict[str, tuple[Callable, str]] = {
    'normal': (
        _normal,
        'lambda x: 1/({sigma}*sqrt(2*pi))*exp(-((x-{mu})**2/(2*{sigma}**2)))',
    ),
    'lognormal': (
        _lognormal,
        'lambda x: 1/(x*{sigma})*exp(-((log(x)-{mu})**2/(2*{sigma}**2)))',
    ),
}

PARAMETRIC_KINDS = tuple(sorted(_FAMILY_REGISTRY))


# ──────────────────────────────────────────────────────────────────────────────
# Representations
# ──────────────────────────────────────────────────────────────────────────────

class DensityRepresentation:
    """Common base of the three density variants."""

    #: Short tag used by the summary string: 'Vec' or 'Fnc'.
    tag: str = ''

    def evaluate(self, y: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @property
    def is_analytic(self) -> bool:
        return self.tag == 'Fnc'


@dataclass(eq=False)
class ExplicitDensity(DensityRepresentation):
    """Density given as values at the pivots."""

    values: np.ndarray
    tag = 'Vec'

    def __post_init__(self):
        self.values = np.array(self.values, dtype=float).ravel()

    def evaluate(self, y: np.ndarray) -> np.ndarray:
        return self.values.copy()


@dataclass(frozen=True)
class ParametricDensity(DensityRepresentation):
    """Density from a named family with location μ and width σ."""

    kind: str
    mu: float
    sigma: float
    tag = 'Fnc'

    def __call__(self, x) -> np.ndarray:
        func, _ = _FAMILY_REGISTRY[self.kind]
        return func(np.asarray(x, dtype=float), self.mu, self.sigma)

    def evaluate(self, y: np.ndarray) -> np.ndarray:
        return self(y)

    @property
    def source(self) -> str:
        """Lambda source of the formula with μ and σ written out as numbers."""
        _, template = _FAMILY_REGISTRY[self.kind]
        return template.format(mu=repr(float(self.mu)), sigma=repr(float(self.sigma)))


@dataclass(eq=False)
class RawDensity(DensityRepresentation):
    """Density given as an arbitrary callable ``f(x)``."""

    func: Callable
    source: Optional[str] = field(default=None)
    tag = 'Fnc'

    def __post_init__(self):
        if self.source is None and isinstance(self.func, DensityExpression):
            self.source = self.func.source
        elif self.source is None:
            self.source = function_source(self.func)

    def __call__(self, x) -> np.ndarray:
        return self.func(x)

    def evaluate(self, y: np.ndarray) -> np.ndarray:
        """
        Values at every pivot.

        The function is called once on the whole array; functions that only
        accept scalars (``math.exp``, ``x if x > a else b``) are called once
        per pivot instead.
        """
        try:
            out = np.asarray(self.func(y), dtype=float)
        except (TypeError, ValueError):
            log.debug("Density function %r is not vectorised; evaluating per pivot", self.func)
            out = np.array([self.func(v) for v in y], dtype=float)
        if out.ndim == 0:
            return np.full(len(y), float(out))
        return out.ravel()


# ──────────────────────────────────────────────────────────────────────────────
# Source text helpers
# ──────────────────────────────────────────────────────────────────────────────

def _code_signature(code: CodeType) -> tuple:
    """Bytecode, constants and names of *code*, ignoring positions."""
    consts = tuple(
        _code_signature(c) if isinstance(c, CodeType) else c for c in code.co_consts
    )
    return code.co_code, consts, code.co_names, code.co_varnames


def _lambda_code(node: ast.Lambda) -> Optional[CodeType]:
    try:
        module = compile(ast.Expression(body=node), '<density>', 'eval')
    except (SyntaxError, ValueError):
        return None
    for const in module.co_consts:
        if isinstance(const, CodeType):
            return const
    return None


def function_source(func: Callable) -> Optional[str]:
    """
    Recover the lambda expression that defined *func*.

    Every lambda on the defining lines is compiled and compared with
    ``func.__code__``; the source is returned only if the matches agree on
    one text, and only if that text can be read back by
    :class:`~pycat.core.expressions.DensityExpression`.  Named functions,
    builtins, numpy ufuncs and lambdas that use names other than their
    argument and the math functions return None.
    """
    if getattr(func, '__name__', None) != '<lambda>':
        return None
    try:
        src = textwrap.dedent(inspect.getsource(func))
    except (OSError, TypeError):
        return None
    try:
        tree = ast.parse(src)
    except SyntaxError:
        return None

    target = _code_signature(func.__code__)
    matches = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Lambda):
            code = _lambda_code(node)
            if code is not None and _code_signature(code) == target:
                matches.add(ast.unparse(node))

    if len(matches) != 1:
        log.debug("Found %d matching lambdas for %r", len(matches), func)
        return None
    source = matches.pop()
    try:
        DensityExpression(source)
    except SerializationError as exc:
        log.debug("Lambda source %r cannot be read back: %s", source, exc)
        return None
    return source


def parse_source(source: str) -> DensityExpression:
    """Density function from lambda source, see :mod:`pycat.core.expressions`."""
    return DensityExpression(source)


def template_for(kind: str) -> str:
    return _FAMILY_REGISTRY[kind][1]


# ──────────────────────────────────────────────────────────────────────────────
# Resolution
# ──────────────────────────────────────────────────────────────────────────────

def _is_descriptor(value) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 3
        and isinstance(value[0], str)
    )


def _parametric(value) -> tuple[Optional[ParametricDensity], str]:
    kind, mu, sigma = value
    kind = kind.lower()
    if kind not in _FAMILY_REGISTRY:
        return None, (
            f"unsupported distribution family '{value[0]}'; "
            f"supported: {list(PARAMETRIC_KINDS)}"
        )
    if isinstance(mu, (bool, str)) or isinstance(sigma, (bool, str)):
        return None, 'mu and sigma must be real numbers'
    try:
        mu, sigma = float(mu), float(sigma)
    except (TypeError, ValueError):
        return None, 'mu and sigma must be real numbers'
    if not (np.isfinite(mu) and np.isfinite(sigma)) or sigma <= 0:
        return None, 'mu must be finite and sigma finite and positive'
    return ParametricDensity(kind, mu, sigma), ''


def resolve_density(value) -> tuple[bool, Optional[DensityRepresentation], str]:
    """
    Turn a density assignment into a representation.

    Accepted inputs:
        * an existing :class:`DensityRepresentation`
        * ``None`` or an empty sequence (clears the density)
        * a one-argument callable
        * a 3-element descriptor ``(kind, mu, sigma)`` with
          ``kind`` in {'normal', 'lognormal'} (case-insensitive)
        * a finite, real numeric vector

    Returns:
        ``(accepted, representation, message)``.  When accepted, the
        representation is None for a cleared density.  When rejected, the
        message explains why.
    """
    if isinstance(value, DensityRepresentation):
        return True, value, ''
    if value is None:
        return True, None, ''
    if callable(value):
        return True, RawDensity(value), ''
    if _is_descriptor(value):
        rep, msg = _parametric(value)
        return rep is not None, rep, msg
    if isinstance(value, (str, bytes)):
        return False, None, 'density must be a function, a vector or a (kind, mu, sigma) descriptor'
    if isinstance(value, np.ndarray) and value.size == 0:
        return True, None, ''
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True, None, ''

    arr = as_vector(value)
    if arr is None:
        return False, None, 'density must be a function, a vector or a (kind, mu, sigma) descriptor'
    if not np.all(np.isfinite(arr)):
        return False, None, 'density vector must contain only finite values'
    return True, ExplicitDensity(arr), ''
