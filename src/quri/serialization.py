"""
Serialization helpers for QURI criteria trees.

Provides dict / JSON / YAML round-trip via an intermediate plain-object form:

    {"conjunction": "or", "criteria": [[field, operator, value], {...}, "raw"]}

Deserialization always builds a fresh tree. The result never shares mutable
structure with its input, even when the input is itself a CriteriaNode.
"""
from __future__ import annotations

import copy
import json
import warnings
from collections.abc import Mapping
from typing import Any, Callable, Dict, List

import yaml

from quri.criteria import (
    FIELD_KEY,
    LONG_FIELD_KEY,
    CriteriaNode,
    Criterion,
    EntryKind,
    as_criterion,
    classify_entry,
)
from quri.operators import DEFAULT_CONJUNCTION, QuriWarning


def _plain_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def _clone(obj: Any) -> Any:
    # Objects that cannot be copied (locks, sockets, ...) are shared as-is.
    try:
        return copy.deepcopy(obj)
    except (TypeError, copy.Error):
        return obj


def criterion_to_plain(c: Criterion, verbose: bool = False, use_short_field_key: bool = False) -> Any:
    if verbose:
        key = FIELD_KEY if use_short_field_key else LONG_FIELD_KEY
        return {key: c.field, "operator": c.operator, "value": _plain_value(c.value)}
    return [c.field, c.operator, _plain_value(c.value)]


def _to_dict(node: CriteriaNode, verbose: bool, use_short_field_key: bool, opaque: Callable[[Any], Any]) -> Dict[str, Any]:
    d: Dict[str, Any] = {}
    if verbose or node.conjunction != DEFAULT_CONJUNCTION:
        d["conjunction"] = node.conjunction

    criteria: List[Any] = []
    for child in node.get_children_snapshot():
        kind = classify_entry(child)
        if kind is EntryKind.NESTED:
            nested = child if isinstance(child, CriteriaNode) else criteria_from_dict(child)
            criteria.append(_to_dict(nested, verbose, use_short_field_key, opaque))
        elif kind is EntryKind.OPAQUE:
            criteria.append(opaque(child))
        else:
            criteria.append(criterion_to_plain(as_criterion(child), verbose, use_short_field_key))
    d["criteria"] = criteria
    return d


def criteria_to_dict(node: CriteriaNode, verbose: bool = False, use_short_field_key: bool = False) -> Dict[str, Any]:
    """
    Export a tree as a plain dict.

    Compact form (default) writes leaves as [field, operator, value] lists and
    omits the conjunction when it is the default. Verbose form writes leaves
    as dicts and always includes the conjunction. Criterion-shaped mappings
    and 3-item sequences added with append_criteria are exported as leaves;
    other opaque entries are passed through unchanged.
    """
    return _to_dict(node, verbose, use_short_field_key, opaque=lambda entry: entry)


def _append_entry(node: CriteriaNode, item: Any) -> None:
    kind = classify_entry(item)
    if kind is EntryKind.NESTED:
        node.append_criteria(criteria_from_dict(item))
    elif kind is EntryKind.OPAQUE:
        node.append_criteria(_clone(item))
    else:
        c = as_criterion(item)
        node.append_expression(c.field, c.operator, _clone(c.value))


def criteria_from_dict(d: Any) -> CriteriaNode:
    """
    Build a new tree from a plain dict or an existing CriteriaNode.

    None yields an empty node. Input that is neither a mapping nor a node
    also yields an empty node, with a QuriWarning. A missing or null
    "conjunction" means "and".
    """
    if d is None:
        return CriteriaNode()

    if isinstance(d, CriteriaNode):
        conjunction = d.conjunction
        items = d.get_children_snapshot()
    elif isinstance(d, Mapping):
        conjunction = d.get("conjunction")
        items = d.get("criteria")
    else:
        warnings.warn(f"Cannot build criteria from {type(d).__name__}; using an empty tree", QuriWarning)
        return CriteriaNode()

    node = CriteriaNode(DEFAULT_CONJUNCTION if conjunction is None else conjunction)

    if items is None:
        return node
    if not isinstance(items, (list, tuple)):
        warnings.warn(f"Ignoring criteria of type {type(items).__name__}; expected a list", QuriWarning)
        return node

    for item in items:
        _append_entry(node, item)
    return node


def _is_plain(obj: Any) -> bool:
    """True if obj decodes back from JSON/YAML with the same str() form."""
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return True
    if type(obj) is list:
        return all(_is_plain(v) for v in obj)
    if type(obj) is dict:
        return all(isinstance(k, str) and _is_plain(v) for k, v in obj.items())
    return False


def _opaque_text(entry: Any) -> Any:
    return entry if _is_plain(entry) else str(entry)


def _text_safe(obj: Any) -> Any:
    """Replace values JSON/YAML cannot encode with their str() form."""
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return obj
    if isinstance(obj, Mapping):
        return {str(k): _text_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_text_safe(v) for v in obj]
    return str(obj)


def _text_dict(node: CriteriaNode) -> Dict[str, Any]:
    return _text_safe(_to_dict(node, False, False, opaque=_opaque_text))


def criteria_to_json(node: CriteriaNode) -> str:
    return json.dumps(_text_dict(node), sort_keys=True)


def criteria_from_json(s: str | bytes | None) -> CriteriaNode:
    if not s:
        return CriteriaNode()
    try:
        d = json.loads(s)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        warnings.warn(f"Invalid criteria JSON: {e}", QuriWarning)
        return CriteriaNode()
    return criteria_from_dict(d)


def criteria_to_yaml(node: CriteriaNode) -> str:
    return yaml.safe_dump(_text_dict(node))


def criteria_from_yaml(s: str | bytes | None) -> CriteriaNode:
    if not s:
        return CriteriaNode()
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        warnings.warn(f"Invalid criteria YAML: {e}", QuriWarning)
        return CriteriaNode()
    return criteria_from_dict(d)


def parse_any(raw: Any) -> CriteriaNode:
    """Deserialize JSON text, or fall back to the plain-object form."""
    if isinstance(raw, (str, bytes, bytearray)):
        return criteria_from_json(raw)
    return criteria_from_dict(raw)
