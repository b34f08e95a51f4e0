# backend/discovery/services/category_tree.py
"""
Category taxonomy helpers.

Categories only store an upward `parent_id` edge, so descendant expansion
builds a child index first. Category data is editable by admins, so every
walk tracks visited ids and stops on cycles instead of looping forever.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Optional, Set

from ..models.catalog import Category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryPath:
    """Names from the root category down, at most four levels deep."""

    primary: Optional[str] = None
    secondary: Optional[str] = None
    tertiary: Optional[str] = None
    specific: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "tertiary": self.tertiary,
            "specific": self.specific,
        }


@dataclass(frozen=True)
class CategorySuggestion:
    suggested_category_id: Optional[str] = None
    category_path: Optional[CategoryPath] = None


class CategoryTree:
    """Read-only view over a category list with parent/child navigation."""

    def __init__(self, categories: Iterable[Category]) -> None:
        self._categories: List[Category] = list(categories)
        self._by_id: Dict[str, Category] = {c.id: c for c in self._categories}
        self._children: Dict[str, List[str]] = defaultdict(list)
        for category in self._categories:
            if category.parent_id:
                self._children[category.parent_id].append(category.id)

    def get(self, category_id: str) -> Optional[Category]:
        return self._by_id.get(category_id)

    def descendants(self, category_id: str) -> Set[str]:
        """Return `category_id` plus every category below it."""
        visited: Set[str] = set()
        stack = [category_id]
        while stack:
            current = stack.pop()
            if current in visited:
                logger.debug("Category cycle detected at %s", current)
                continue
            visited.add(current)
            stack.extend(self._children.get(current, ()))
        return visited

    def matching_name(self, text: str) -> List[str]:
        """Ids of categories whose name contains `text` (case-insensitive)."""
        needle = (text or "").lower()
        if not needle:
            return []
        return [c.id for c in self._categories if needle in (c.name or "").lower()]

    def expand_name_match(self, text: str) -> Set[str]:
        """Descendant closure of every category whose name contains `text`."""
        expanded: Set[str] = set()
        for category_id in self.matching_name(text):
            expanded |= self.descendants(category_id)
        return expanded

    def path(self, category_id: str) -> CategoryPath:
        """Walk parents up to the root and return the names top-down."""
        names: List[str] = []
        seen: Set[str] = set()
        current = self._by_id.get(category_id)
        while current is not None and current.id not in seen:
            seen.add(current.id)
            names.insert(0, current.name)
            current = self._by_id.get(current.parent_id) if current.parent_id else None

        padded = names + [None] * (4 - len(names))
        return CategoryPath(
            primary=padded[0],
            secondary=padded[1],
            tertiary=padded[2],
            specific=padded[3],
        )

    def suggest(self, text: Optional[str]) -> CategorySuggestion:
        """
        Suggest a category for free-text service input.

        The first category (in catalog order) whose name appears in the text
        wins. Returns an empty suggestion when nothing matches.
        """
        if not text:
            return CategorySuggestion()
        lowered = text.lower()
        for category in self._categories:
            if not category.name:
                continue
            if category.name.lower() in lowered:
                return CategorySuggestion(
                    suggested_category_id=category.id,
                    category_path=self.path(category.id),
                )
        return CategorySuggestion()
