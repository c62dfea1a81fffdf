"""
QURI Criteria Builder

Builds the compact QURI filter string from a tree of field/operator/value
criteria joined by AND/OR conjunctions, and moves that tree between three
forms:
    - CriteriaNode (in-memory tree)
    - plain dict / list objects (and their JSON or YAML text)
    - QURI text

QURI text is write-only: this package renders it but does not parse it.
"""

from .operators import (
    Conjunction,
    Operator,
    QuriError,
    QuriWarning,
    UnsupportedOperator,
    normalize_operator,
    operator_to_string,
)
from .criteria import CriteriaNode, Criterion
from .serialization import (
    criteria_from_dict,
    criteria_from_json,
    criteria_from_yaml,
    criteria_to_dict,
    criteria_to_json,
    criteria_to_yaml,
    parse_any,
)

__version__ = "0.1.0"

__all__ = [
    "Conjunction",
    "CriteriaNode",
    "Criterion",
    "Operator",
    "QuriError",
    "QuriWarning",
    "UnsupportedOperator",
    "criteria_from_dict",
    "criteria_from_json",
    "criteria_from_yaml",
    "criteria_to_dict",
    "criteria_to_json",
    "criteria_to_yaml",
    "normalize_operator",
    "operator_to_string",
    "parse_any",
]
