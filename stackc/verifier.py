"""stackc.verifier

Structural checks over a compiled program.

- every LABEL name is unique
- every JMP/JZ/JNZ names exactly one LABEL
- net stack effect of an instruction slice (for balance checks)

Calls to undefined procedures are not reported: binding a CALL target is the
runtime's job.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from stackc import instructions as ins
from stackc.instructions import Instruction

# Net change of the evaluation stack depth per tagged instruction kind.
# BEGIN is a frame boundary handled by the runtime. CALL depends on the
# callee's arity and is resolved in stack_effect.
_KIND_EFFECT = {
    ins.BINOP: -1,  # pop 2, push 1
    ins.STORE: -1,
    ins.JZ: -1,
    ins.JNZ: -1,
    ins.JMP: 0,
    ins.LABEL: 0,
    ins.BEGIN: 0,
}

_TOKEN_EFFECT = {
    ins.READ: 1,
    ins.WRITE: -1,
    ins.END: 0,
}


def procedure_arities(program: Iterable[Any]) -> Dict[str, int]:
    """Map each procedure label to its parameter count.

    A procedure is a LABEL immediately followed by a BEGIN instruction.
    """
    arities: Dict[str, int] = {}
    prev = None
    for item in program:
        if (
            isinstance(item, Instruction)
            and item.kind == ins.BEGIN
            and isinstance(prev, Instruction)
            and prev.kind == ins.LABEL
        ):
            arities[prev.value] = len(item.value)
        prev = item
    return arities


def stack_effect(item: Any, arities: Optional[Dict[str, int]] = None) -> int:
    """Net stack depth change caused by one program element.

    A CALL pops its arguments and pushes one result, so its effect needs the
    callee's arity from ``arities`` (keyed by CALL target label). Operands
    spelled like a keyword token are counted as that keyword.
    """
    if isinstance(item, Instruction):
        if item.kind == ins.CALL:
            if arities is None or item.value not in arities:
                raise ValueError(f"arity of {item.value} is unknown")
            return 1 - arities[item.value]
        return _KIND_EFFECT[item.kind]
    if isinstance(item, str) and item in _TOKEN_EFFECT:
        return _TOKEN_EFFECT[item]
    # literal or variable operand
    return 1


def stack_depth(program: Iterable[Any], arities: Optional[Dict[str, int]] = None) -> int:
    """Net stack effect of a program slice.

    Without ``arities`` the callee arities are read from the slice itself,
    which works for a whole compiled program.
    """
    items = list(program)
    if arities is None:
        arities = procedure_arities(items)
    return sum(stack_effect(item, arities) for item in items)


def check_labels(program: Iterable[Any]) -> List[str]:
    """Return a list of label problems (empty when the program is sound)."""
    items = list(program)
    defined = Counter(
        it.value for it in items if isinstance(it, Instruction) and it.kind == ins.LABEL
    )
    problems: List[str] = []
    for name, count in sorted(defined.items()):
        if count > 1:
            problems.append(f"label {name} defined {count} times")
    for it in items:
        if isinstance(it, Instruction) and it.kind in ins.BRANCH_KINDS and it.value not in defined:
            problems.append(f"{it.kind} to undefined label {it.value}")
    return problems
