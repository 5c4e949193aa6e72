"""
Abstract Syntax Tree (AST) Node Definitions

Defines the closed set of node variants accepted by the stack-machine code
generator, the top-level program envelope, and the errors raised when a tree
does not have the shape its node kinds require.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Type


class MalformedTree(Exception):
    """Input tree does not describe a valid program"""

    def __init__(self, message: str, kind: Optional[str] = None):
        self.kind = kind
        if kind is not None:
            message = f"{message} (node kind {kind!r})"
        super().__init__(message)


class MissingField(MalformedTree):
    """A node lacks a field its kind requires"""

    def __init__(self, field_name: str, kind: Optional[str] = None):
        self.field = field_name
        super().__init__(f"missing required field {field_name!r}", kind)


class UnknownKind(MalformedTree):
    """A node's discriminant is not one of the known variants"""

    def __init__(self, kind: Any):
        super().__init__(f"unknown node kind {kind!r}")
        self.kind = kind


class MissingDiscriminant(MalformedTree):
    """A node has no 'kind' field at all"""

    def __init__(self):
        super().__init__("node has no 'kind' field")


@dataclass
class ASTNode:
    """Base class for all AST nodes"""
    # External discriminant of the variant (the 'kind' field of the document).
    KIND: ClassVar[str] = ""


# ============== Expressions ==============

@dataclass
class Const(ASTNode):
    """Literal scalar"""
    KIND: ClassVar[str] = "Const"
    value: Any


@dataclass
class Var(ASTNode):
    """Variable reference"""
    KIND: ClassVar[str] = "Var"
    name: str


@dataclass
class BinaryOp(ASTNode):
    """Binary operator application"""
    KIND: ClassVar[str] = "op"
    name: str  # operator token, e.g. '+', '<'
    left: ASTNode
    right: ASTNode


@dataclass
class Call(ASTNode):
    """Procedure invocation with positional arguments"""
    KIND: ClassVar[str] = "Call"
    func: str
    args: List[ASTNode] = field(default_factory=list)


# ============== Statements ==============

@dataclass
class Assign(ASTNode):
    """Store the value of rvalue into the variable lvalue"""
    KIND: ClassVar[str] = "Assn"
    lvalue: str
    rvalue: ASTNode


@dataclass
class Read(ASTNode):
    """Read a value from input into a variable"""
    KIND: ClassVar[str] = "Read"
    name: str


@dataclass
class Write(ASTNode):
    """Evaluate a value and write it to output"""
    KIND: ClassVar[str] = "Write"
    value: ASTNode


@dataclass
class Sequence(ASTNode):
    """Ordered composition of two statements"""
    KIND: ClassVar[str] = "Seq"
    left: ASTNode
    right: ASTNode


@dataclass
class If(ASTNode):
    """Conditional; both arms are mandatory (use Skip for an empty one)"""
    KIND: ClassVar[str] = "if"
    cond: ASTNode
    then: ASTNode
    else_: ASTNode


@dataclass
class While(ASTNode):
    """Pre-test loop"""
    KIND: ClassVar[str] = "While"
    cond: ASTNode
    body: ASTNode


@dataclass
class Procedure(ASTNode):
    """Named procedure definition"""
    KIND: ClassVar[str] = "Fun"
    name: str
    params: List[Any]
    body: ASTNode


@dataclass
class Skip(ASTNode):
    """No-op statement"""
    KIND: ClassVar[str] = "Skip"


# ============== Program ==============

@dataclass
class Program:
    """Top-level envelope: main statement plus procedure definitions.

    Procedures in ``funs`` are compiled after the main program's END marker,
    in the order given.
    """
    prog: ASTNode
    funs: List[ASTNode] = field(default_factory=list)


NODE_TYPES: Dict[str, Type[ASTNode]] = {
    cls.KIND: cls
    for cls in (
        Const,
        Var,
        BinaryOp,
        Assign,
        Read,
        Write,
        Sequence,
        If,
        While,
        Procedure,
        Call,
        Skip,
    )
}
