"""stackc.codegen

AST -> stack machine instruction stream.

The generator walks the tree depth-first and appends instructions to a single
output buffer. Expression nodes leave exactly one value on the evaluation
stack; statement nodes leave the stack depth unchanged.

Control flow is lowered to labels and branches:

    if:     <cond> JZ else; <then> JMP end; LABEL else; <else> LABEL end
    while:  JMP cond; LABEL body; <body> LABEL cond; <cond> JNZ body

Procedures are laid out after the main program's END marker:

    LABEL FUNCTION_<name>; BEGIN <params>; <body> END

and calls push their arguments right-to-left before ``CALL FUNCTION_<name>``,
so the leftmost argument ends up on top of the stack.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple, Union

from stackc import instructions as ins
from stackc.ast_nodes import (
    ASTNode,
    Assign,
    BinaryOp,
    Call,
    Const,
    If,
    MalformedTree,
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
from stackc.instructions import Instruction, InstructionBuffer
from stackc.labels import IF, WHILE, LabelAllocator, function_label

logger = logging.getLogger(__name__)


class CodeGenerator:
    """Generates a flat stack-machine program from an AST.

    One instance owns its output buffer and label counters and must not be
    shared between threads. With ``reset_labels`` (the default) the counters
    restart at zero on every ``generate`` call; otherwise they keep counting
    across calls until ``reset(labels=True)`` is requested.
    """

    def __init__(self, reset_labels: bool = True):
        self.reset_labels = reset_labels
        self._buffer = InstructionBuffer()
        self._labels = LabelAllocator()

    def reset(self, labels: bool = True) -> None:
        """Discard the output buffer and, optionally, the label counters."""
        self._buffer.clear()
        if labels:
            self._labels.reset()
            logger.debug("label counters reset")

    def generate(self, tree: Union[Program, ASTNode]) -> Tuple[Any, ...]:
        """Compile a program envelope or a bare statement tree.

        For an envelope the main program is followed by one END marker and
        then every procedure in ``funs``. A bare tree gets no END marker.
        """
        self.reset(labels=self.reset_labels)
        try:
            if isinstance(tree, Program):
                self._gen(tree.prog)
                self._emit(ins.END)
                for fun in tree.funs:
                    self._gen(fun)
            else:
                self._gen(tree)
        except (MalformedTree, RecursionError):
            # A partially emitted program is never valid output.
            self._buffer.clear()
            raise
        program = self._buffer.snapshot()
        logger.debug("generated %d instruction(s)", len(program))
        return program

    # -------------
    # Emission
    # -------------

    def _emit(self, item: Any) -> None:
        self._buffer.emit(item)

    # -------------
    # Dispatch
    # -------------

    def _gen(self, node: ASTNode) -> None:
        if isinstance(node, Skip):
            return
        if isinstance(node, Const):
            self._emit(node.value)
            return
        if isinstance(node, Var):
            self._emit(node.name)
            return
        if isinstance(node, BinaryOp):
            self._gen(node.left)
            self._gen(node.right)
            self._emit(Instruction(ins.BINOP, node.name))
            return
        if isinstance(node, Assign):
            self._gen(node.rvalue)
            self._emit(Instruction(ins.STORE, node.lvalue))
            return
        if isinstance(node, Read):
            self._emit(ins.READ)
            self._emit(Instruction(ins.STORE, node.name))
            return
        if isinstance(node, Write):
            self._gen(node.value)
            self._emit(ins.WRITE)
            return
        if isinstance(node, Sequence):
            self._gen_sequence(node)
            return
        if isinstance(node, If):
            self._gen_if(node)
            return
        if isinstance(node, While):
            self._gen_while(node)
            return
        if isinstance(node, Procedure):
            self._gen_procedure(node)
            return
        if isinstance(node, Call):
            self._gen_call(node)
            return
        kind = getattr(node, "KIND", None) or type(node).__name__
        raise UnknownKind(kind)

    # -------------
    # Control flow
    # -------------

    def _gen_sequence(self, node: Sequence) -> None:
        # Statement chains are flattened with an explicit stack, left before right.
        pending = [node]
        while pending:
            cur = pending.pop()
            if isinstance(cur, Sequence):
                pending.append(cur.right)
                pending.append(cur.left)
            else:
                self._gen(cur)

    def _gen_if(self, node: If) -> None:
        else_lbl, end_lbl = self._labels.allocate(IF)
        self._gen(node.cond)
        self._emit(ins.jz(else_lbl))
        self._gen(node.then)
        self._emit(ins.jmp(end_lbl))
        self._emit(ins.label(else_lbl))
        self._gen(node.else_)
        self._emit(ins.label(end_lbl))

    def _gen_while(self, node: While) -> None:
        cond_lbl, body_lbl = self._labels.allocate(WHILE)
        # Enter through the condition so the body never runs when it is false.
        self._emit(ins.jmp(cond_lbl))
        self._emit(ins.label(body_lbl))
        self._gen(node.body)
        self._emit(ins.label(cond_lbl))
        self._gen(node.cond)
        self._emit(ins.jnz(body_lbl))

    # -------------
    # Procedures
    # -------------

    def _gen_procedure(self, node: Procedure) -> None:
        logger.debug("emitting procedure %s(%s)", node.name, ", ".join(map(str, node.params)))
        self._emit(ins.label(function_label(node.name)))
        self._emit(Instruction(ins.BEGIN, tuple(node.params)))
        self._gen(node.body)
        self._emit(ins.END)

    def _gen_call(self, node: Call) -> None:
        for arg in reversed(node.args):
            self._gen(arg)
        self._emit(Instruction(ins.CALL, function_label(node.func)))
