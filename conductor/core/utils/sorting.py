"""
Sorting helpers for catalog listings.

Two orderings are used across the Commons:

- ``normalized_sort_key``: lower-cased letters only, used for filter option
  lists and rubric titles.
- ``collator_key``: case-insensitive, punctuation-ignoring and numeric-aware
  ("Chapter 2" sorts before "Chapter 10"), used for book listings.
"""

from __future__ import annotations

import random
import re
from typing import Any, List, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")

_NON_LETTERS = re.compile(r"[^a-zA-Z]")
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_NUMBER_SPLIT = re.compile(r"(\d+)")


def normalized_sort_key(value: Any) -> str:
    if value is None:
        return ""
    return _NON_LETTERS.sub("", str(value)).lower()


def collator_key(value: Any) -> Tuple[Union[Tuple[int, int], Tuple[int, str]], ...]:
    if value is None:
        return ()
    text = _PUNCTUATION.sub("", str(value)).casefold().strip()
    parts = []
    for chunk in _NUMBER_SPLIT.split(text):
        if not chunk:
            continue
        # numbers sort before words at the same position
        parts.append((0, int(chunk)) if chunk.isdigit() else (1, chunk))
    return tuple(parts)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def sort_books(books: Sequence[T], sort_choice: str = "title") -> List[T]:
    """Sort books by ``title``, ``author`` or ``random`` order.

    Unknown sort choices fall back to title order.
    """
    items = list(books)
    if sort_choice == "random":
        random.shuffle(items)
        return items
    field = "author" if sort_choice == "author" else "title"
    return sorted(items, key=lambda book: collator_key(_field(book, field) or ""))
