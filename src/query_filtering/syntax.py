"""OperatorGrammar: ``operator:value`` expressions and comma-packed expressions."""

from __future__ import annotations

import re
from typing import NamedTuple

from .operators import OPERATOR_TOKENS, FilterOperator

# Longest tokens first so "gte" wins over "gt" and "nin" over "in"
_TOKEN_ALTERNATION = "|".join(
    re.escape(token) for token in sorted(OPERATOR_TOKENS, key=len, reverse=True)
)
# Prefixes are case-sensitive: "IN:x" is an implicit equality on the text "IN:x"
_EXPRESSION_RE = re.compile(rf"^({_TOKEN_ALTERNATION}):(.+)$", re.DOTALL)
_SEGMENT_PREFIX_RE = re.compile(rf"(?:^|,)\s*(?:{_TOKEN_ALTERNATION}):")


class OperatorExpression(NamedTuple):
    """One parsed expression; ``explicit`` is False for implicit equality."""

    operator: FilterOperator
    value: str
    explicit: bool


class OperatorGrammar:
    """
    Parse raw parameter values into operator expressions.

    ``gt:5`` is an explicit expression, ``5`` an implicit equality. When
    *allow_packed* is set, a value carrying two or more operator prefixes
    at segment starts (``gt:5,lt:10``) is split on commas; segments
    without a prefix are glued back onto the preceding expression so
    multi-valued operands (``in:a,b,c``) survive the split.
    """

    def __init__(self, *, allow_packed: bool = True) -> None:
        self._allow_packed = allow_packed

    def parse(self, raw: str) -> list[OperatorExpression]:
        if self._allow_packed and self.has_multiple_operators(raw):
            return [self.parse_expression(part) for part in self._split(raw)]
        return [self.parse_expression(raw)]

    def parse_expression(self, expression: str) -> OperatorExpression:
        match = _EXPRESSION_RE.match(expression)
        if match is None:
            return OperatorExpression(FilterOperator.EQ, expression, False)
        operator = OPERATOR_TOKENS[match.group(1)]
        return OperatorExpression(operator, match.group(2), True)

    @staticmethod
    def has_multiple_operators(raw: str) -> bool:
        return len(_SEGMENT_PREFIX_RE.findall(raw)) > 1

    @staticmethod
    def _split(raw: str) -> list[str]:
        clauses: list[str] = []
        for segment in raw.split(","):
            stripped = segment.strip()
            if _EXPRESSION_RE.match(stripped) or not clauses:
                clauses.append(stripped)
            else:
                clauses[-1] += "," + stripped
        return clauses
