"""
Operator and Conjunction Grammar for QURI

Every criterion carries a user-supplied operator string. Only the
canonical short forms ever appear in rendered QURI text, so each alias is
mapped to exactly one Operator before rendering.

ARCHITECTURAL RULE:
    Operators are validated lazily.
    Building a tree never fails; rendering does.
"""

from enum import Enum
from typing import Any, Dict


class Operator(Enum):
    """
    Canonical operator kinds used in rendered QURI text.

    Keep this list closed. Every member must have at least one alias in
    OPERATOR_ALIASES.
    """

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"
    LIKE = "like"
    BETWEEN = "between"


class Conjunction(Enum):
    """Logical joiner applied between sibling expressions."""

    AND = "and"
    OR = "or"


DEFAULT_CONJUNCTION = Conjunction.AND.value

AND_SEPARATOR = ","
OR_SEPARATOR = "|"


# Exact, case-sensitive match only.
OPERATOR_ALIASES: Dict[str, Operator] = {
    "=": Operator.EQ,
    "==": Operator.EQ,
    "===": Operator.EQ,
    "eq": Operator.EQ,
    "!=": Operator.NEQ,
    "!==": Operator.NEQ,
    "neq": Operator.NEQ,
    ">": Operator.GT,
    "gt": Operator.GT,
    ">=": Operator.GTE,
    "gte": Operator.GTE,
    "<": Operator.LT,
    "lt": Operator.LT,
    "<=": Operator.LTE,
    "lte": Operator.LTE,
    "in": Operator.IN,
    "not_in": Operator.NIN,
    "nin": Operator.NIN,
    "like": Operator.LIKE,
    "between": Operator.BETWEEN,
}


class QuriError(Exception):
    """Base class for all QURI errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedOperator(QuriError, ValueError):
    """Raised when a criterion's operator matches no known alias."""

    def __init__(self, operator: Any):
        self.operator = operator
        super().__init__(f"Unsupported operator {operator!r}")


class QuriWarning(UserWarning):
    """Emitted when malformed input is degraded instead of rejected."""


def normalize_operator(operator: Any) -> Operator:
    """
    Map a user-supplied operator alias to its canonical Operator.

    Examples:
        normalize_operator("==")      -> Operator.EQ
        normalize_operator("not_in")  -> Operator.NIN

    Args:
        operator: Alias string, or an Operator member (returned unchanged)

    Returns:
        Canonical Operator

    Raises:
        UnsupportedOperator: If the alias is not recognized
    """
    if isinstance(operator, Operator):
        return operator
    if isinstance(operator, str) and operator in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[operator]
    raise UnsupportedOperator(operator)


def operator_to_string(operator: Any) -> str:
    """Return the canonical operator keyword used in QURI text."""
    return normalize_operator(operator).value
