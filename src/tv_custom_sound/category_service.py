"""Category set and display labels for TV Custom Sound.

Categories are identified internally by short ids (e.g. ``"trade"``) kept
in declaration order.  The order matters: when several categories have a
replacement sound and nothing else decides between them, the first declared
one is used.  Users may give categories display labels; the label mapping is
stored in a ``labels.json`` file alongside the configuration.

Structure of ``labels.json``::

    {
      "trade": "Trade",       # category ID -> display label
      "alert": "Price alert"
    }

When no label exists for a category the capitalised id is returned.  The
mapping is case sensitive on the id side but case insensitive when looking
up labels, and ids themselves are accepted case insensitively by
:meth:`CategoryService.resolve`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Sequence, Tuple

from . import tuning
from .errors import UnknownCategoryError

_ID_RE = re.compile(tuning.CATEGORY_ID_PATTERN)


@dataclass
class CategoryService:
    """Ordered, open set of category ids with display labels."""

    categories: Sequence[str] = tuning.DEFAULT_CATEGORIES
    labels: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ids: Tuple[str, ...] = tuple(self.categories)
        if not ids:
            raise ValueError("At least one category is required")
        seen = set()
        for category_id in ids:
            if not _ID_RE.match(category_id):
                raise ValueError(f"Invalid category id '{category_id}'")
            if category_id in seen:
                raise ValueError(f"Duplicate category id '{category_id}'")
            seen.add(category_id)
        self.categories = ids
        self._inverse: Dict[str, str] = {}
        for category_id, display in self.labels.items():
            self._inverse[display.lower()] = category_id

    def __iter__(self) -> Iterator[str]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self.categories

    @property
    def default(self) -> str:
        """The first declared category."""
        return self.categories[0]

    def get_label(self, category_id: str) -> str:
        """Return the user-visible label for a category id."""
        return self.labels.get(category_id, category_id.capitalize())

    def get_category_id(self, label: str) -> Optional[str]:
        """Return the category id for a display label, or ``None``."""
        return self._inverse.get(label.lower())

    def require(self, category_id: str) -> str:
        """Return ``category_id`` if declared, else raise UnknownCategoryError."""
        if category_id not in self.categories:
            raise UnknownCategoryError(category_id)
        return category_id

    def resolve(self, name: str) -> str:
        """Resolve a user-typed id or label to a declared category id."""
        lowered = name.strip().lower()
        if lowered in self.categories:
            return lowered
        category_id = self.get_category_id(lowered)
        if category_id is not None and category_id in self.categories:
            return category_id
        raise UnknownCategoryError(name)
