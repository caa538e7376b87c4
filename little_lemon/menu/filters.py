from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from little_lemon.menu.models import MenuItem


def derive_categories(items: Iterable[MenuItem]) -> list[str]:
    return sorted({item.category for item in items})


def active_categories(categories: Sequence[str], selections: Sequence[bool]) -> list[str]:
    """
    Resolve the categories eligible for a query.

    Deselecting every toggle shows everything, so an all-false selection
    vector yields every category rather than none.
    """
    if len(categories) != len(selections):
        raise ValueError(
            f"Selection vector length {len(selections)} does not match "
            f"{len(categories)} categories"
        )
    if not any(selections):
        return list(categories)
    return [category for category, selected in zip(categories, selections) if selected]


def display_category(category: str) -> str:
    return category[:1].upper() + category[1:]


def build_filter_clause(text: str, categories: Sequence[str]) -> tuple[str, list[Any]]:
    """Return a parameterized WHERE clause (empty when unfiltered) and its params."""
    conditions: list[str] = []
    params: list[Any] = []
    if text:
        # instr() is a case-sensitive substring test, unlike LIKE in SQLite.
        conditions.append("instr(title, ?) > 0")
        params.append(text)
    if categories:
        placeholders = ", ".join("?" for _ in categories)
        conditions.append(f"category IN ({placeholders})")
        params.extend(category.lower() for category in categories)
    if not conditions:
        return "", params
    return " WHERE " + " AND ".join(conditions), params

