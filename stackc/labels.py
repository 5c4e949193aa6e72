"""stackc.labels

Label naming and allocation.

Branch targets are matched purely by name, so the naming format is fixed:

    IF_ELSE_<n>, IF_END_<n>
    WHILE_CONDITION_<n>, WHILE_BODY_<n>
    FUNCTION_<procedure name>

Each construct kind has its own counter and a disjoint name prefix, which
makes every allocated name unique within one compilation pass.
"""

from __future__ import annotations

from typing import Dict, Tuple

IF = "if"
WHILE = "while"

FUNCTION_PREFIX = "FUNCTION_"

# construct -> (prefix, role of first label, role of second label)
_ROLES: Dict[str, Tuple[str, str, str]] = {
    IF: ("IF", "ELSE", "END"),
    WHILE: ("WHILE", "CONDITION", "BODY"),
}


def label_name(construct: str, role: str, counter: int) -> str:
    prefix = _ROLES[construct][0]
    return f"{prefix}_{role}_{counter}"


def function_label(name: str) -> str:
    return f"{FUNCTION_PREFIX}{name}"


class LabelAllocator:
    """Per-construct monotonically increasing label counters."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.reset()

    def reset(self) -> None:
        self.counters = {construct: 0 for construct in _ROLES}

    def allocate(self, construct: str) -> Tuple[str, str]:
        """Return the label pair for one instance of ``construct``.

        ``if`` yields ``(else, end)``; ``while`` yields ``(condition, body)``.
        """
        if construct not in _ROLES:
            raise ValueError(f"no labels defined for construct {construct!r}")
        n = self.counters[construct]
        self.counters[construct] = n + 1
        _prefix, first, second = _ROLES[construct]
        return label_name(construct, first, n), label_name(construct, second, n)
