"""
Core Criteria Tree

Defines the two structures a QURI filter is built from:
    - Criterion (a single field/operator/value leaf)
    - CriteriaNode (a conjunction plus an ordered list of children)

A CriteriaNode child is one of:
    - Criterion, or a criterion-shaped mapping or 3-item sequence
    - a nested CriteriaNode (owned exclusively by its parent), or a
      mapping with a "criteria" list
    - an opaque value, rendered through its own str() form

ARCHITECTURAL RULE:
    Append order == render order == serialize order.
    Nothing here validates operators until render() is called.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from .operators import (
    AND_SEPARATOR,
    DEFAULT_CONJUNCTION,
    OR_SEPARATOR,
    Conjunction,
    Operator,
    operator_to_string,
)


Scalar = Union[str, int, float, bool, None]
Value = Union[Scalar, Tuple[Scalar, ...]]


def _quote(value: Any) -> str:
    """Quote a field or scalar with JSON string rules."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


@dataclass(frozen=True)
class Criterion:
    """
    A single leaf expression.

    Example:
        Criterion("customer_name", "like", "Greg%")

    Renders as:
        "customer_name".like("Greg%")

    Properties:
        field: Field name
        operator: Operator alias as supplied (e.g. "==", "not_in", "gte")
        value: Scalar, or a tuple of scalars for multi-value operators
            (in, nin, between). Lists are stored as tuples.

    IMPORTANT:
        The operator is kept verbatim and is not validated here.
        An unknown alias only fails once the tree is rendered.
    """

    field: str
    operator: str
    value: Value = None

    def __post_init__(self):
        if isinstance(self.operator, Operator):
            object.__setattr__(self, "operator", self.operator.value)
        if isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))

    @property
    def is_multi_value(self) -> bool:
        return isinstance(self.value, tuple)

    def render(self) -> str:
        """
        Render as <field>.<operator>(<value>).

        Sequence values are rendered element by element and comma-joined,
        without the surrounding brackets of a JSON array.

        Raises:
            UnsupportedOperator: If the operator alias is not recognized
        """
        field_string = _quote(self.field)
        operator_string = operator_to_string(self.operator)
        if self.is_multi_value:
            value_string = ",".join(_quote(item) for item in self.value)
        else:
            value_string = _quote(self.value)
        return f"{field_string}.{operator_string}({value_string})"


FIELD_KEY = "field"
LONG_FIELD_KEY = "fieldName"


class EntryKind(Enum):
    """Shape of one child or raw criteria entry, in matching priority order."""
    NESTED = "nested"
    CRITERION = "criterion"
    TUPLE = "tuple"
    OPAQUE = "opaque"


def _field_of(item: Mapping) -> Any:
    return item.get(FIELD_KEY) or item.get(LONG_FIELD_KEY)


def classify_entry(item: Any) -> EntryKind:
    """
    Decide how a child is rendered, exported and deserialized.

    Order matters: a mapping with a "criteria" key is always a nested
    node, even if it also looks like a criterion or has three items.
    Rendering, export and import all go through this one function, so a
    round-trip never changes how an entry is read.
    """
    if isinstance(item, CriteriaNode):
        return EntryKind.NESTED
    if isinstance(item, Mapping) and item.get("criteria") is not None:
        return EntryKind.NESTED
    if isinstance(item, Criterion):
        return EntryKind.CRITERION
    if isinstance(item, Mapping) and _field_of(item) and item.get("operator"):
        return EntryKind.CRITERION
    if isinstance(item, (list, tuple)) and len(item) == 3:
        return EntryKind.TUPLE
    return EntryKind.OPAQUE


def as_criterion(item: Any) -> Optional[Criterion]:
    """Return item as a Criterion if it is criterion- or tuple-shaped, else None."""
    kind = classify_entry(item)
    if kind is EntryKind.CRITERION:
        if isinstance(item, Criterion):
            return item
        return Criterion(_field_of(item), item["operator"], item.get("value"))
    if kind is EntryKind.TUPLE:
        field, operator, value = item
        return Criterion(field, operator, value)
    return None


class CriteriaNode:
    """
    A node of the criteria tree (a "Quri").

    Holds a conjunction and an ordered list of children. Children at one
    level are joined with "," when the conjunction is "and" and with "|"
    otherwise. Nested nodes and opaque values are wrapped in parentheses.

    Example:
        root = CriteriaNode()
        root.append_expression("field_1", "=", "my value")
        inner = CriteriaNode("or")
        inner.append_expression("field_2", "=", "a")
        inner.append_expression("field_3", "=", "b")
        root.append_criteria(inner)

        root.render()
        # "field_1".eq("my value"),("field_2".eq("a")|"field_3".eq("b"))

    IMPORTANT:
        The conjunction is not validated. Any value other than "and"
        joins children with "|".
    """

    def __init__(self, conjunction: Union[str, Conjunction] = DEFAULT_CONJUNCTION):
        self._conjunction = DEFAULT_CONJUNCTION
        self._children: List[Any] = []
        self.set_conjunction(conjunction)

    def get_conjunction(self) -> Any:
        return self._conjunction

    def set_conjunction(self, conjunction: Union[str, Conjunction]) -> None:
        if isinstance(conjunction, Conjunction):
            conjunction = conjunction.value
        self._conjunction = conjunction

    conjunction = property(get_conjunction, set_conjunction)

    @property
    def children(self) -> List[Any]:
        return self.get_children_snapshot()

    def get_children_snapshot(self) -> List[Any]:
        """Return a copy of the children list, safe to mutate."""
        return list(self._children)

    def append_expression(self, field: str, operator: Union[str, Operator], value: Any = None) -> "CriteriaNode":
        """
        Append a field/operator/value leaf.

        Example:
            node.append_expression("customer_name", "like", "Greg%")

        Args:
            field: Field name
            operator: Operator alias (validated at render time)
            value: Scalar, or a sequence for multi-value operators

        Returns:
            self, for chaining
        """
        self._children.append(Criterion(field, operator, value))
        return self

    def append_criteria(self, criteria: Any) -> "CriteriaNode":
        """
        Append a nested CriteriaNode or any object with a str() form.

        Returns:
            self, for chaining
        """
        self._children.append(criteria)
        return self

    def append_quri(self, quri: "CriteriaNode") -> "CriteriaNode":
        """Alias for append_criteria."""
        return self.append_criteria(quri)

    def render(self) -> str:
        """
        Return the canonical QURI string.

        Raises:
            UnsupportedOperator: On the first unknown operator anywhere in
                the tree, nested nodes included
        """
        parts = []
        for child in self._children:
            kind = classify_entry(child)
            if kind is EntryKind.NESTED and not isinstance(child, CriteriaNode):
                # Raw {"criteria": [...]} mapping.
                parts.append(f"({CriteriaNode.from_dict(child)})")
            elif kind in (EntryKind.CRITERION, EntryKind.TUPLE):
                parts.append(as_criterion(child).render())
            else:
                parts.append(f"({child})")
        separator = AND_SEPARATOR if self._conjunction == DEFAULT_CONJUNCTION else OR_SEPARATOR
        return separator.join(parts)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"CriteriaNode(conjunction={self._conjunction!r}, children={self._children!r})"

    def __len__(self) -> int:
        return len(self._children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CriteriaNode):
            return NotImplemented
        return self._conjunction == other._conjunction and self._children == other._children

    __hash__ = None

    # Serialization lives in quri.serialization; these delegate to it.

    def to_dict(self, verbose: bool = False, use_short_field_key: bool = False) -> dict:
        from .serialization import criteria_to_dict

        return criteria_to_dict(self, verbose=verbose, use_short_field_key=use_short_field_key)

    def to_json(self) -> str:
        from .serialization import criteria_to_json

        return criteria_to_json(self)

    def to_yaml(self) -> str:
        from .serialization import criteria_to_yaml

        return criteria_to_yaml(self)

    @classmethod
    def from_dict(cls, obj: Any) -> "CriteriaNode":
        from .serialization import criteria_from_dict

        return criteria_from_dict(obj)

    @classmethod
    def from_json(cls, text: Union[str, bytes, None]) -> "CriteriaNode":
        from .serialization import criteria_from_json

        return criteria_from_json(text)

    @classmethod
    def from_yaml(cls, text: Union[str, bytes, None]) -> "CriteriaNode":
        from .serialization import criteria_from_yaml

        return criteria_from_yaml(text)

    @classmethod
    def parse_any(cls, raw: Any) -> "CriteriaNode":
        from .serialization import parse_any

        return parse_any(raw)
