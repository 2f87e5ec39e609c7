"""
String forms of size distributions.

Two representations are produced:

``to_reconstructable_string``
    ``Distribution(<y>,<density>,<boundaries>)``, a Python expression that
    rebuilds the distribution.  Arrays are written as lists of shortest
    round-trip float literals, so numbers survive bit-exactly.  An analytic
    density is written as lambda source; a parametric density is written as
    its formula with μ and σ as literal numbers.  Empty densities and
    undefined boundaries are written as ``[]``.

``to_summary_string``
    ``"<Tag>; d_10 = %.2g, m_3 = %.2g"`` with Tag ``Fnc`` (analytic) or
    ``Vec`` (vector), or exactly ``"Empty"``.

:func:`from_reconstructable_string` parses the first form back.  Lambda
sources are never passed to ``eval``: they are checked against a whitelist of
arithmetic and numpy math functions and evaluated by walking their syntax tree
(see :mod:`pycat.core.expressions`).
"""

from __future__ import annotations

import ast
import re
from typing import Optional

import numpy as np

from pycat.core.density import (
    ExplicitDensity,
    ParametricDensity,
    PARAMETRIC_KINDS,
    RawDensity,
    parse_source,
    template_for,
)
from pycat.core.errors import SerializationError, ValidationRejected

_NUMBER = r'-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'


def _template_regex(template: str) -> re.Pattern:
    """Regex matching a family template with any μ / σ literals filled in."""
    pattern = re.escape(template)
    for name in ('mu', 'sigma'):
        token = re.escape('{' + name + '}')
        pattern = pattern.replace(token, f'(?P<{name}>{_NUMBER})', 1)
        pattern = pattern.replace(token, f'(?P={name})')
    return re.compile(pattern)


_FAMILY_PATTERNS = {kind: _template_regex(template_for(kind)) for kind in PARAMETRIC_KINDS}


# ──────────────────────────────────────────────────────────────────────────────
# Writing
# ──────────────────────────────────────────────────────────────────────────────

def array_to_string(values: Optional[np.ndarray]) -> str:
    """``[v1, v2, ...]`` with shortest round-trip float literals."""
    if values is None:
        return '[]'
    arr = np.asarray(values, dtype=float).ravel()
    return '[' + ', '.join(repr(float(v)) for v in arr) + ']'


def density_to_string(rep) -> str:
    """Text of a density representation inside the reconstructable string."""
    if rep is None:
        return '[]'
    if isinstance(rep, ExplicitDensity):
        return array_to_string(rep.values)
    if isinstance(rep, ParametricDensity):
        return rep.source
    if isinstance(rep, RawDensity):
        if rep.source is None:
            raise SerializationError(
                f"Cannot recover the source of density function {rep.func!r}; "
                "only lambda expressions can be written out"
            )
        return rep.source
    raise SerializationError(f"Unknown density representation {type(rep).__name__}")


def to_reconstructable_string(distribution) -> str:
    """
    String that rebuilds *distribution* when parsed.

    Raises:
        SerializationError: if the density is a function whose source text
            cannot be recovered.
    """
    return 'Distribution({},{},{})'.format(
        array_to_string(distribution.y),
        density_to_string(distribution.representation),
        array_to_string(distribution.boundaries),
    )


def to_summary_string(distribution) -> str:
    """Short description: density type, d_10 = m_1/m_0 and m_3."""
    rep = distribution.representation
    if rep is None:
        return 'Empty'
    with np.errstate(divide='ignore', invalid='ignore'):
        d10 = np.divide(distribution.moment(1), distribution.moment(0))
    return '%s; d_10 = %.2g, m_3 = %.2g' % (rep.tag, d10, distribution.moment(3))


# ──────────────────────────────────────────────────────────────────────────────
# Parsing
# ──────────────────────────────────────────────────────────────────────────────

def _literal_array(node: ast.AST, name: str) -> np.ndarray:
    if not isinstance(node, ast.List):
        raise SerializationError(f"{name} must be a list literal")
    try:
        values = ast.literal_eval(node)
    except ValueError as exc:
        raise SerializationError(f"{name} is not a list of numbers: {exc}") from exc
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
        raise SerializationError(f"{name} is not a list of numbers")
    return np.asarray(values, dtype=float)


def _density_from_node(node: ast.AST, text: str):
    if isinstance(node, ast.List):
        values = _literal_array(node, 'density')
        return ExplicitDensity(values) if values.size else None

    if isinstance(node, ast.Lambda):
        source = ast.get_source_segment(text, node)
        for kind, pattern in _FAMILY_PATTERNS.items():
            match = pattern.fullmatch(source)
            if match:
                return ParametricDensity(kind, float(match['mu']), float(match['sigma']))
        return RawDensity(parse_source(source), source=source)

    raise SerializationError("density must be a list literal or a lambda expression")


def from_reconstructable_string(text: str):
    """
    Parse ``Distribution(<y>,<density>,<boundaries>)`` into a Distribution.

    Raises:
        SerializationError: if the text does not follow the grammar or its
            values violate the distribution constraints.
    """
    from pycat.core.distribution import Distribution

    text = text.strip()
    try:
        tree = ast.parse(text, mode='eval')
    except SyntaxError as exc:
        raise SerializationError(f"Not a distribution string: {exc}") from exc

    call = tree.body
    if not (
        isinstance(call, ast.Call)
        and isinstance(call.func, ast.Name)
        and call.func.id == 'Distribution'
        and len(call.args) == 3
        and not call.keywords
    ):
        raise SerializationError("Expected 'Distribution(<y>,<density>,<boundaries>)'")

    y_node, density_node, boundaries_node = call.args
    y = _literal_array(y_node, 'y')
    boundaries = _literal_array(boundaries_node, 'boundaries')
    density = _density_from_node(density_node, text)

    # Setters are applied one by one so that an undefined boundary list
    # stays undefined instead of being replaced by the implicit one.
    d = Distribution(strict=True)
    try:
        if y.size:
            d.set_y(y)
        if density is not None:
            d.set_density(density)
        if boundaries.size:
            d.set_boundaries(boundaries)
    except ValidationRejected as exc:
        raise SerializationError(str(exc)) from exc
    d.strict = False
    return d
