"""stackc.instructions

Instruction model for the stack virtual machine.

A compiled program is a flat list whose elements are either:

- bare tokens: a literal value, a variable name used as an operand, or one of
  the keyword tokens ``READ``, ``WRITE``, ``END``;
- tagged instructions ``Instruction(kind, value)`` where kind is one of
  ``Binop``, ``ST``, ``LABEL``, ``JMP``, ``JZ``, ``JNZ``, ``BEGIN``, ``CALL``.

Order is the only structure. ``InstructionBuffer`` is the single place the
output of a compilation is grown.

Operands and keyword tokens share one spelling space: a variable named
``READ``, ``WRITE`` or ``END`` is emitted as the same bare string as the
keyword, and nothing downstream can tell the two apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Tuple

READ = "READ"
WRITE = "WRITE"
END = "END"

BINOP = "Binop"
STORE = "ST"
LABEL = "LABEL"
JMP = "JMP"
JZ = "JZ"
JNZ = "JNZ"
BEGIN = "BEGIN"
CALL = "CALL"

INSTRUCTION_KINDS = frozenset({BINOP, STORE, LABEL, JMP, JZ, JNZ, BEGIN, CALL})
BRANCH_KINDS = frozenset({JMP, JZ, JNZ})


@dataclass(frozen=True)
class Instruction:
    kind: str
    value: Any

    def to_json(self) -> dict:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"kind": self.kind, "value": value}


def label(name: str) -> Instruction:
    return Instruction(LABEL, name)


def jmp(name: str) -> Instruction:
    return Instruction(JMP, name)


def jz(name: str) -> Instruction:
    return Instruction(JZ, name)


def jnz(name: str) -> Instruction:
    return Instruction(JNZ, name)


class InstructionBuffer:
    """Append-only output buffer of one compilation pass."""

    def __init__(self):
        self._items: List[Any] = []

    def emit(self, item: Any) -> None:
        self._items.append(item)

    def clear(self) -> None:
        self._items = []

    def snapshot(self) -> Tuple[Any, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)


def to_json(program) -> List[Any]:
    """Convert a compiled program into plain JSON-serializable data."""
    out: List[Any] = []
    for item in program:
        if isinstance(item, Instruction):
            out.append(item.to_json())
        else:
            out.append(item)
    return out


def from_json(data: List[Any]) -> List[Any]:
    """Inverse of ``to_json``: rebuild ``Instruction`` objects from records."""
    out: List[Any] = []
    for item in data:
        if isinstance(item, dict) and item.get("kind") in INSTRUCTION_KINDS:
            value = item.get("value")
            if item["kind"] == BEGIN and isinstance(value, list):
                value = tuple(value)
            out.append(Instruction(item["kind"], value))
        else:
            out.append(item)
    return out
