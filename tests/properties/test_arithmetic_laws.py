"""Property-based tests for compiled arithmetic.

Expressions are generated together with their value: each strategy draws a
tree of operations, writes it as text with only the parentheses that
precedence requires, and folds the same tree in double precision. The
compiler only ever sees the text.

  1. The native result equals the independently folded value.
  2. Compiling the same text in two independent engines gives identical
     results.
  3. Redundant parentheses never change the result.
"""

from __future__ import annotations

import math
import operator

from hypothesis import given, settings, HealthCheck
from hypothesis import strategies as st

from calcjit import evaluate


# ---------------------------------------------------------------------------
# Double-precision folding
# ---------------------------------------------------------------------------

def _divide(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


# symbol -> (precedence, fold)
_BINARY = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, _divide),
}

# Literals, groupings and negations never need parentheses around them.
_ATOM = 3


def same(a: float, b: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b


# ---------------------------------------------------------------------------
# Strategies: (text, value, precedence)
# ---------------------------------------------------------------------------

literals = st.one_of(
    st.integers(min_value=0, max_value=1000).map(str),
    st.tuples(
        st.integers(min_value=0, max_value=999),
        st.integers(min_value=0, max_value=999),
    ).map(lambda p: f"{p[0]}.{p[1]}"),
)

atoms = literals.map(lambda s: (s, float(s), _ATOM))


def _wrap(node, needed: bool) -> str:
    return f"({node[0]})" if needed else node[0]


def _binary(left, symbol: str, right):
    prec, fold = _BINARY[symbol]
    text = f"{_wrap(left, left[2] < prec)} {symbol} {_wrap(right, right[2] <= prec)}"
    return text, fold(left[1], right[1]), prec


def _negate(node):
    return f"-{_wrap(node, node[2] < _ATOM)}", -node[1], _ATOM


def _extend(children):
    binary = st.tuples(children, st.sampled_from(sorted(_BINARY)), children).map(
        lambda t: _binary(*t)
    )
    grouped = children.map(lambda n: (f"({n[0]})", n[1], _ATOM))
    negated = children.map(_negate)
    return st.one_of(binary, grouped, negated)


expressions = st.recursive(atoms, _extend, max_leaves=12)
sources = expressions.map(lambda n: n[0])


# ===========================================================================
# Properties
# ===========================================================================

class TestCompiledArithmetic:

    @given(expressions)
    @settings(max_examples=60, deadline=None,
              suppress_health_check=[HealthCheck.too_slow])
    def test_matches_folded_value(self, node):
        source, expected, _ = node
        assert same(evaluate(source), expected), f"{source!r}: expected {expected}"

    @given(sources)
    @settings(max_examples=30, deadline=None)
    def test_idempotent_across_engines(self, source: str):
        assert same(evaluate(source), evaluate(source))

    @given(sources)
    @settings(max_examples=30, deadline=None)
    def test_outer_parentheses_are_transparent(self, source: str):
        assert same(evaluate(f"(({source}))"), evaluate(source))

    @given(st.tuples(literals, literals, literals))
    @settings(max_examples=50, deadline=None)
    def test_subtraction_is_left_associative(self, parts):
        a, b, c = (float(p) for p in parts)
        assert evaluate(f"{parts[0]} - {parts[1]} - {parts[2]}") == (a - b) - c

    @given(st.tuples(literals, literals, literals))
    @settings(max_examples=50, deadline=None)
    def test_multiplication_binds_tighter(self, parts):
        a, b, c = (float(p) for p in parts)
        assert evaluate(f"{parts[0]} + {parts[1]} * {parts[2]}") == a + b * c
