"""
Example criteria builder.

Builds a small two-level filter: one top-level equality plus an OR group,
and a second tree exercising every operator family.
"""
from quri.criteria import CriteriaNode
from quri.operators import Conjunction


def build_example_criteria() -> CriteriaNode:
    """
    Renders as:
        "field_1".eq("my value"),("field_2".eq("my inner value")|"field_3".eq("my inner value 2"))
    """
    inner = CriteriaNode(Conjunction.OR)
    inner.append_expression("field_2", "=", "my inner value")
    inner.append_expression("field_3", "=", "my inner value 2")

    root = CriteriaNode()
    root.append_expression("field_1", "=", "my value")
    root.append_criteria(inner)
    return root


def build_example_order_filter(min_total: float = 100, statuses=("paid", "shipped")) -> CriteriaNode:
    """Orders above a total, in one of the given statuses, for Greg or a VIP."""
    customer = CriteriaNode(Conjunction.OR)
    customer.append_expression("customer_name", "like", "Greg%")
    customer.append_expression("vip", "==", True)

    root = CriteriaNode()
    root.append_expression("total", ">=", min_total)
    root.append_expression("status", "in", list(statuses))
    root.append_expression("created_at", "between", ["2024-01-01", "2024-12-31"])
    root.append_criteria(customer)
    return root
