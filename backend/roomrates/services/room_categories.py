"""Room category normalization.

Free-form labels ("Triple Deluxe Suite", "doubleRooms", "QUADRUPLE") are folded
into a small set of canonical categories by case-insensitive substring rules.
Rules are evaluated in order and the first match wins, so the list order is
part of the contract.
"""

from __future__ import annotations

from typing import Any, Tuple


QUAD = "quad"
TRIPLE = "triple"
DOUBLE = "double"
SUITE = "suite"
FAMILY = "family"

CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("quadrooms", "quadruple"), QUAD),
    (("triplerooms", "triple"), TRIPLE),
    (("doublerooms", "double"), DOUBLE),
    (("suite",), SUITE),
    (("familyrooms", "family"), FAMILY),
)

CANONICAL_CATEGORIES: Tuple[str, ...] = tuple(label for _, label in CATEGORY_RULES)


def normalize_category(raw_label: Any) -> Any:
    """Map a raw room label to its canonical category.

    Unmatched labels pass through unchanged and act as their own category.
    Non-string input is returned as is.
    """

    if not isinstance(raw_label, str):
        return raw_label

    lowered = raw_label.lower()
    for patterns, canonical in CATEGORY_RULES:
        if any(p in lowered for p in patterns):
            return canonical
    return raw_label
