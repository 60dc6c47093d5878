"""
In-memory search, filter and sort over already loaded entity lists.

Nothing here touches the database: the functions derive the displayed
subset from a list the caller fetched once, so re-sorting or narrowing a
search never issues another query.

Key Features:
    - Case-insensitive substring search on names
    - Wrestler filtering by associated promotion, faction and championship
      names (OR within a kind, AND across kinds)
    - Filter options built from the loaded wrestlers themselves
    - Name / wrestler-count sort toggle
"""

import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")

RELATION_FIELDS = ("promotions", "factions", "championships")


def name_sort_key(name: str) -> str:
    """Collation key: compatibility-normalized and casefolded."""
    return unicodedata.normalize("NFKD", name).casefold()


def sort_by_name(items: Iterable[T]) -> list[T]:
    """Stable name-ascending sort; identical names keep their incoming order."""
    return sorted(items, key=lambda item: name_sort_key(item.name))


def matches_search(name: str, query: str | None) -> bool:
    if not query:
        return True
    return query.casefold() in name.casefold()


def search_by_name(items: Iterable[T], query: str | None) -> list[T]:
    """Items whose name contains ``query``, ignoring case. Empty query keeps all."""
    return [item for item in items if matches_search(item.name, query)]


def _related_names(wrestler: Any, relation: str) -> list[str]:
    return [entity.name for entity in getattr(wrestler, relation, None) or []]


def filter_options(wrestlers: Iterable[Any]) -> dict[str, list[str]]:
    """Distinct related names per relation, in first-seen order.

    Options come from the wrestlers passed in, so an entity nobody is linked
    to never shows up as a filter choice.
    """
    options: dict[str, dict[str, None]] = {relation: {} for relation in RELATION_FIELDS}
    for wrestler in wrestlers:
        for relation in RELATION_FIELDS:
            for name in _related_names(wrestler, relation):
                options[relation].setdefault(name, None)
    return {relation: list(names) for relation, names in options.items()}


@dataclass(frozen=True)
class WrestlerFilter:
    promotions: frozenset[str] = field(default_factory=frozenset)
    factions: frozenset[str] = field(default_factory=frozenset)
    championships: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_lists(
        cls,
        promotions: Iterable[str] | None = None,
        factions: Iterable[str] | None = None,
        championships: Iterable[str] | None = None,
    ) -> "WrestlerFilter":
        return cls(
            promotions=frozenset(promotions or ()),
            factions=frozenset(factions or ()),
            championships=frozenset(championships or ()),
        )

    @property
    def is_active(self) -> bool:
        return bool(self.promotions or self.factions or self.championships)

    def matches(self, wrestler: Any) -> bool:
        for relation in RELATION_FIELDS:
            selected = getattr(self, relation)
            if selected and not any(
                name in selected for name in _related_names(wrestler, relation)
            ):
                return False
        return True


def filter_wrestlers(
    wrestlers: Iterable[T],
    query: str | None = None,
    wrestler_filter: WrestlerFilter | None = None,
) -> list[T]:
    """Wrestlers matching the search AND every non-empty relation filter."""
    wrestler_filter = wrestler_filter or WrestlerFilter()
    return [
        wrestler
        for wrestler in wrestlers
        if matches_search(wrestler.name, query) and wrestler_filter.matches(wrestler)
    ]


class SortOrder(str, Enum):
    NAME = "name"
    COUNT = "count"

    def toggle(self) -> "SortOrder":
        return SortOrder.COUNT if self is SortOrder.NAME else SortOrder.NAME


def sort_entities(items: Sequence[T], order: SortOrder = SortOrder.NAME) -> list[T]:
    """Re-sort a loaded list by name (ascending) or wrestler count (descending)."""
    if order is SortOrder.COUNT:
        return sorted(items, key=lambda item: item.wrestler_count, reverse=True)
    return sort_by_name(items)
