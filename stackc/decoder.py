"""stackc.decoder

Conversion of an already-parsed, self-describing document (nested dicts,
lists and scalars, as produced by ``json.load``) into AST nodes.

This is the untyped ingestion boundary, so it is the place where malformed
trees are detected:

- a node without a ``kind`` field -> ``MissingDiscriminant``
- a ``kind`` outside the known variant set -> ``UnknownKind``
- a kind-required field that is absent -> ``MissingField``

Errors surface lazily, at the node where the defect is found. All required
fields of a node are checked for presence before any child is decoded.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Tuple, Union

from stackc.ast_nodes import (
    ASTNode,
    Assign,
    BinaryOp,
    Call,
    Const,
    If,
    MalformedTree,
    MissingDiscriminant,
    MissingField,
    NODE_TYPES,
    Procedure,
    Program,
    Read,
    Sequence,
    Skip,
    UnknownKind,
    Var,
    While,
    Write,
)

logger = logging.getLogger(__name__)

# The bare string form of the no-op statement.
SKIP_TOKEN = "Skip"


def _as_node(kind: str, name: str, raw: Any) -> ASTNode:
    return decode_node(raw)


def _as_nodes(kind: str, name: str, raw: Any) -> List[ASTNode]:
    if not isinstance(raw, list):
        raise MalformedTree(f"field {name!r} must be a list", kind)
    return [decode_node(item) for item in raw]


def _as_list(kind: str, name: str, raw: Any) -> List[Any]:
    if not isinstance(raw, list):
        raise MalformedTree(f"field {name!r} must be a list", kind)
    return list(raw)


def _as_name(kind: str, name: str, raw: Any) -> str:
    if not isinstance(raw, str):
        raise MalformedTree(f"field {name!r} must be a string", kind)
    return raw


def _as_target(kind: str, name: str, raw: Any) -> str:
    # Store targets may be given either as a plain name or as a Var node.
    if isinstance(raw, dict) and raw.get("kind") == Var.KIND:
        if "name" not in raw:
            raise MissingField("name", Var.KIND)
        raw = raw["name"]
    return _as_name(kind, name, raw)


def _as_scalar(kind: str, name: str, raw: Any) -> Any:
    return raw


_Converter = Callable[[str, str, Any], Any]

# kind -> ((document field, constructor keyword, converter), ...)
_FIELDS: Dict[str, Tuple[Tuple[str, str, _Converter], ...]] = {
    Const.KIND: (("value", "value", _as_scalar),),
    Var.KIND: (("name", "name", _as_name),),
    BinaryOp.KIND: (
        ("name", "name", _as_name),
        ("left", "left", _as_node),
        ("right", "right", _as_node),
    ),
    Assign.KIND: (
        ("lvalue", "lvalue", _as_target),
        ("rvalue", "rvalue", _as_node),
    ),
    Read.KIND: (("name", "name", _as_target),),
    Write.KIND: (("value", "value", _as_node),),
    If.KIND: (
        ("cond", "cond", _as_node),
        ("then", "then", _as_node),
        ("else", "else_", _as_node),
    ),
    While.KIND: (
        ("cond", "cond", _as_node),
        ("body", "body", _as_node),
    ),
    Procedure.KIND: (
        ("name", "name", _as_name),
        ("params", "params", _as_list),
        ("body", "body", _as_node),
    ),
    Call.KIND: (
        ("func", "func", _as_name),
        ("args", "args", _as_nodes),
    ),
    Skip.KIND: (),
}


def _decode_sequence(raw: Dict[str, Any]) -> ASTNode:
    # Seq chains nest on either side and are walked with an explicit stack.
    # A Seq has its fields checked before its left child is decoded, and the
    # left child is fully decoded before the right one.
    work: List[Tuple[bool, Any]] = [(False, raw)]
    done: List[ASTNode] = []
    while work:
        build, item = work.pop()
        if build:
            right = done.pop()
            left = done.pop()
            done.append(Sequence(left=left, right=right))
        elif isinstance(item, dict) and item.get("kind") == Sequence.KIND:
            for doc_name in ("left", "right"):
                if doc_name not in item:
                    raise MissingField(doc_name, Sequence.KIND)
            work.append((True, None))
            work.append((False, item["right"]))
            work.append((False, item["left"]))
        else:
            done.append(decode_node(item))
    return done[0]


def decode_node(raw: Any) -> ASTNode:
    """Decode one node (and, recursively, its children)."""
    if raw == SKIP_TOKEN:
        return Skip()
    if not isinstance(raw, dict) or "kind" not in raw:
        raise MissingDiscriminant()

    kind = raw["kind"]
    if not isinstance(kind, str) or kind not in NODE_TYPES:
        raise UnknownKind(kind)
    if kind == Sequence.KIND:
        return _decode_sequence(raw)

    fields = _FIELDS[kind]
    for doc_name, _attr, _conv in fields:
        if doc_name not in raw:
            raise MissingField(doc_name, kind)

    kwargs = {attr: conv(kind, doc_name, raw[doc_name]) for doc_name, attr, conv in fields}
    return NODE_TYPES[kind](**kwargs)


def decode_document(doc: Any) -> Union[Program, ASTNode]:
    """Decode a top-level document.

    A mapping with a ``prog`` field is a program envelope (``funs`` optional);
    anything else is treated as a single bare statement tree.
    """
    if isinstance(doc, dict) and "prog" in doc:
        funs = doc.get("funs", [])
        if not isinstance(funs, list):
            raise MalformedTree("field 'funs' must be a list")
        prog = decode_node(doc["prog"])
        logger.debug("decoded program envelope with %d procedure(s)", len(funs))
        return Program(prog=prog, funs=[decode_node(f) for f in funs])
    return decode_node(doc)
