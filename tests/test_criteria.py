"""
Tests for the criteria tree and QURI rendering.
"""

import pytest
from quri.criteria import CriteriaNode, Criterion
from quri.operators import Conjunction, Operator, UnsupportedOperator


class TestRendering:
    """Test CriteriaNode.render() output."""

    def test_basic_string_from_criteria(self):
        node = CriteriaNode()
        node.append_expression("field_1", "=", "my value")
        assert node.render() == '"field_1".eq("my value")'

    def test_closure_is_applied_to_inner_criteria(self):
        node = CriteriaNode()
        inner = CriteriaNode(Conjunction.OR)
        node.append_expression("field_1", "=", "my value")
        inner.append_expression("field_2", "=", "my inner value")
        inner.append_expression("field_3", "=", "my inner value 2")
        node.append_criteria(inner)

        assert node.render() == (
            '"field_1".eq("my value"),'
            '("field_2".eq("my inner value")|"field_3".eq("my inner value 2"))'
        )

    def test_quote_escaping(self):
        node = CriteriaNode()
        node.append_expression('field"1', "=", 'my"value')
        assert node.render() == '"field\\"1".eq("my\\"value")'

    def test_arrays_are_flattened(self):
        node = CriteriaNode()
        node.append_expression("field_1", "not_in", [1, 2, 3, 4])
        assert node.render() == '"field_1".nin(1,2,3,4)'

    def test_array_of_strings(self):
        node = CriteriaNode()
        node.append_expression("status", "in", ["a,b", 'c"d'])
        assert node.render() == '"status".in("a,b","c\\"d")'

    def test_scalar_types(self):
        node = CriteriaNode()
        node.append_expression("n", ">", 1.5)
        node.append_expression("flag", "==", True)
        node.append_expression("missing", "eq", None)
        assert node.render() == '"n".gt(1.5),"flag".eq(true),"missing".eq(null)'

    def test_non_ascii_is_not_escaped(self):
        node = CriteriaNode()
        node.append_expression("name", "like", "Zoë%")
        assert node.render() == '"name".like("Zoë%")'

    def test_and_joins_with_comma(self):
        node = CriteriaNode()
        node.append_expression("a", "=", 1).append_expression("b", "=", 2)
        assert node.render() == '"a".eq(1),"b".eq(2)'

    def test_or_joins_with_pipe(self):
        node = CriteriaNode("or")
        node.append_expression("a", "=", 1).append_expression("b", "=", 2)
        assert node.render() == '"a".eq(1)|"b".eq(2)'

    def test_nested_and_node_is_still_grouped(self):
        inner = CriteriaNode()
        inner.append_expression("b", "=", 2)
        node = CriteriaNode("or")
        node.append_expression("a", "=", 1)
        node.append_criteria(inner)
        assert node.render() == '"a".eq(1)|("b".eq(2))'

    def test_opaque_string_is_grouped(self):
        node = CriteriaNode()
        node.append_criteria('"raw".eq(1)')
        assert node.render() == '("raw".eq(1))'

    def test_opaque_object_uses_str(self):
        class Raw:
            def __str__(self):
                return "custom"

        node = CriteriaNode()
        node.append_criteria(Raw())
        assert node.render() == "(custom)"

    def test_empty_tree_renders_empty_string(self):
        assert CriteriaNode().render() == ""
        assert str(CriteriaNode("or")) == ""

    def test_str_matches_render(self):
        node = CriteriaNode()
        node.append_expression("a", "gte", 3)
        assert str(node) == node.render()

    def test_operator_enum_is_accepted(self):
        node = CriteriaNode()
        node.append_expression("a", Operator.LTE, 3)
        assert node.render() == '"a".lte(3)'


class TestUnsupportedOperator:
    """Unknown operators are accepted on append and fail on render."""

    def test_append_does_not_raise(self):
        node = CriteriaNode()
        node.append_expression("field_1", "foo", "my value")
        assert len(node) == 1

    def test_render_raises(self):
        node = CriteriaNode()
        node.append_expression("field_1", "foo", "my value")
        with pytest.raises(UnsupportedOperator):
            node.render()

    def test_nested_invalid_operator_aborts_whole_render(self):
        inner = CriteriaNode("or")
        inner.append_expression("field_2", "is", "x")
        node = CriteriaNode()
        node.append_expression("field_1", "=", "ok")
        node.append_criteria(inner)
        with pytest.raises(UnsupportedOperator) as exc_info:
            node.render()
        assert exc_info.value.operator == "is"


class TestConjunction:
    """Test conjunction accessors."""

    def test_default_is_and(self):
        assert CriteriaNode().get_conjunction() == "and"

    def test_get_conjunction(self):
        assert CriteriaNode(Conjunction.OR).conjunction == "or"

    def test_set_conjunction(self):
        node = CriteriaNode(Conjunction.AND)
        node.append_expression("field_1", "=", "my value")
        node.append_expression("field_2", "=", "my value 2")
        node.set_conjunction(Conjunction.OR)

        assert node.conjunction == "or"
        assert node.render() == '"field_1".eq("my value")|"field_2".eq("my value 2")'

    def test_property_setter(self):
        node = CriteriaNode("or")
        node.conjunction = "and"
        assert node.get_conjunction() == "and"

    def test_unknown_conjunction_renders_as_or(self):
        """No validation: anything but 'and' joins with '|'."""
        node = CriteriaNode("xor")
        node.append_expression("a", "=", 1).append_expression("b", "=", 2)
        assert node.conjunction == "xor"
        assert node.render() == '"a".eq(1)|"b".eq(2)'


class TestChildren:
    """Test child access and structural equality."""

    def test_get_children_snapshot(self):
        node = CriteriaNode()
        node.append_expression("field_1", "=", "my value")
        node.append_expression("field_2", "=", "my value 2")

        assert node.get_children_snapshot() == [
            Criterion("field_1", "=", "my value"),
            Criterion("field_2", "=", "my value 2"),
        ]

    def test_snapshot_is_independent(self):
        node = CriteriaNode()
        node.append_expression("field_1", "=", "my value")
        snapshot = node.get_children_snapshot()
        snapshot.append("extra")
        snapshot.clear()

        assert len(node) == 1
        assert len(node.children) == 1

    def test_list_value_is_stored_as_tuple(self):
        values = [1, 2]
        node = CriteriaNode()
        node.append_expression("a", "in", values)
        values.append(3)

        assert node.children[0].value == (1, 2)
        assert node.render() == '"a".in(1,2)'

    def test_criterion_is_immutable(self):
        c = Criterion("a", "=", 1)
        with pytest.raises(AttributeError):
            c.field = "b"

    def test_append_quri_alias(self):
        inner = CriteriaNode()
        node = CriteriaNode().append_quri(inner)
        assert node.children == [inner]

    def test_equality(self):
        a = CriteriaNode("or").append_expression("x", "=", 1)
        b = CriteriaNode("or").append_expression("x", "=", 1)
        assert a == b
        b.append_expression("y", "=", 2)
        assert a != b
        assert a != CriteriaNode("and").append_expression("x", "=", 1)


class TestRawEntries:
    """Raw entries added with append_criteria render by their shape."""

    def test_criterion_mapping_renders_as_leaf(self):
        node = CriteriaNode()
        node.append_criteria({"field": "a", "operator": "=", "value": 1})
        node.append_criteria({"fieldName": "b", "operator": "in", "value": [1, 2]})
        assert node.render() == '"a".eq(1),"b".in(1,2)'

    def test_three_item_sequence_renders_as_leaf(self):
        node = CriteriaNode("or")
        node.append_criteria(["a", ">", 5]).append_criteria(("b", "like", "x%"))
        assert node.render() == '"a".gt(5)|"b".like("x%")'

    def test_criteria_mapping_renders_as_group(self):
        node = CriteriaNode()
        node.append_criteria({"conjunction": "or", "criteria": [["a", "=", 1], ["b", "=", 2]]})
        assert node.render() == '("a".eq(1)|"b".eq(2))'

    def test_incomplete_mapping_stays_opaque(self):
        node = CriteriaNode().append_criteria({"field": "a"})
        assert node.render() == "({'field': 'a'})"

    def test_criterion_mapping_with_bad_operator_raises(self):
        node = CriteriaNode().append_criteria({"field": "a", "operator": "foo"})
        with pytest.raises(UnsupportedOperator):
            node.render()
