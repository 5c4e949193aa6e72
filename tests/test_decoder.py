"""
Unit tests for document decoding and malformed tree detection
"""

import pytest

from stackc.ast_nodes import (
    Assign,
    BinaryOp,
    Call,
    Const,
    If,
    MalformedTree,
    MissingDiscriminant,
    MissingField,
    Procedure,
    Program,
    Read,
    Skip,
    UnknownKind,
    Var,
)
from stackc.compiler import compile_tree
from stackc.decoder import decode_document, decode_node


class TestDecodeNodes:

    def test_binary_op(self):
        node = decode_node({
            "kind": "op",
            "name": "+",
            "left": {"kind": "Const", "value": 1},
            "right": {"kind": "Var", "name": "x"},
        })
        assert node == BinaryOp("+", Const(1), Var("x"))

    def test_if_maps_else_field(self):
        node = decode_node({"kind": "if", "cond": {"kind": "Var", "name": "c"}, "then": "Skip", "else": "Skip"})
        assert isinstance(node, If)
        assert node.else_ == Skip()

    def test_skip_both_forms(self):
        assert decode_node("Skip") == Skip()
        assert decode_node({"kind": "Skip"}) == Skip()

    def test_store_target_may_be_var_node(self):
        node = decode_node({"kind": "Assn", "lvalue": {"kind": "Var", "name": "y"}, "rvalue": {"kind": "Const", "value": 0}})
        assert node == Assign("y", Const(0))
        assert decode_node({"kind": "Read", "name": {"kind": "Var", "name": "z"}}) == Read("z")

    def test_call_and_procedure(self):
        call = decode_node({"kind": "Call", "func": "f", "args": [{"kind": "Const", "value": 1}]})
        assert call == Call("f", [Const(1)])
        fun = decode_node({"kind": "Fun", "name": "f", "params": ["a"], "body": "Skip"})
        assert fun == Procedure("f", ["a"], Skip())

    def test_const_value_kept_as_is(self):
        assert decode_node({"kind": "Const", "value": 2.5}) == Const(2.5)
        assert decode_node({"kind": "Const", "value": "text"}) == Const("text")


class TestDecodeDocument:

    def test_envelope(self):
        doc = {"prog": "Skip", "funs": [{"kind": "Fun", "name": "f", "params": [], "body": "Skip"}]}
        prog = decode_document(doc)
        assert isinstance(prog, Program)
        assert prog.prog == Skip()
        assert [f.name for f in prog.funs] == ["f"]

    def test_envelope_funs_optional(self):
        prog = decode_document({"prog": {"kind": "Read", "name": "x"}})
        assert prog.funs == []

    def test_bare_tree(self):
        assert decode_document({"kind": "Var", "name": "x"}) == Var("x")

    def test_funs_must_be_a_list(self):
        with pytest.raises(MalformedTree):
            decode_document({"prog": "Skip", "funs": {"kind": "Fun"}})


class TestMalformedTrees:

    def test_missing_right_operand(self):
        doc = {"kind": "op", "name": "+", "left": {"kind": "Const", "value": 1}}
        with pytest.raises(MissingField) as ei:
            compile_tree(doc)
        assert ei.value.field == "right"
        assert ei.value.kind == "op"
        assert "right" in str(ei.value)

    def test_missing_field_reported_before_children(self):
        # the broken child is never visited: the parent's own field is checked first
        doc = {"kind": "Seq", "left": {"kind": "Const"}}
        with pytest.raises(MissingField) as ei:
            decode_node(doc)
        assert ei.value.field == "right"

    def test_missing_field_in_nested_node(self):
        doc = {"prog": {"kind": "Write", "value": {"kind": "Var"}}}
        with pytest.raises(MissingField) as ei:
            decode_document(doc)
        assert ei.value.kind == "Var"

    @pytest.mark.parametrize("doc, field", [
        ({"kind": "Const"}, "value"),
        ({"kind": "Assn", "lvalue": "x"}, "rvalue"),
        ({"kind": "if", "cond": "Skip", "then": "Skip"}, "else"),
        ({"kind": "While", "cond": "Skip"}, "body"),
        ({"kind": "Fun", "name": "f", "body": "Skip"}, "params"),
        ({"kind": "Call", "func": "f"}, "args"),
    ])
    def test_missing_fields(self, doc, field):
        with pytest.raises(MissingField) as ei:
            decode_node(doc)
        assert ei.value.field == field

    def test_unknown_kind(self):
        with pytest.raises(UnknownKind) as ei:
            decode_node({"kind": "Goto", "label": "x"})
        assert "Goto" in str(ei.value)

    def test_missing_discriminant(self):
        with pytest.raises(MissingDiscriminant):
            decode_node({"value": 1})

    def test_scalar_in_node_position(self):
        with pytest.raises(MissingDiscriminant):
            decode_node({"kind": "Write", "value": 3})

    def test_all_errors_share_one_base(self):
        for exc in (MissingField, UnknownKind, MissingDiscriminant):
            assert issubclass(exc, MalformedTree)

    def test_args_must_be_a_list(self):
        with pytest.raises(MalformedTree):
            decode_node({"kind": "Call", "func": "f", "args": "Skip"})

    def test_procedure_name_must_be_a_string(self):
        with pytest.raises(MalformedTree):
            decode_node({"kind": "Fun", "name": 3, "params": [], "body": "Skip"})


def _write_chain(n):
    doc = {"kind": "Write", "value": {"kind": "Const", "value": n - 1}}
    for i in reversed(range(n - 1)):
        doc = {"kind": "Seq", "left": {"kind": "Write", "value": {"kind": "Const", "value": i}}, "right": doc}
    return doc


class TestLongChains:

    def test_long_sequence_chain_compiles(self):
        out = compile_tree(_write_chain(3000))
        assert len(out) == 6000
        assert out[-2:] == [2999, "WRITE"]

    def test_left_nested_chain_compiles(self):
        doc = {"kind": "Read", "name": "a"}
        for _ in range(3000):
            doc = {"kind": "Seq", "left": doc, "right": "Skip"}
        assert compile_tree(doc) == ["READ", {"kind": "ST", "value": "a"}]

    def test_defect_deep_in_chain_is_reported(self):
        doc = {"kind": "Seq", "left": "Skip"}
        for _ in range(3000):
            doc = {"kind": "Seq", "left": "Skip", "right": doc}
        with pytest.raises(MissingField) as ei:
            decode_node(doc)
        assert ei.value.field == "right"
        assert ei.value.kind == "Seq"
