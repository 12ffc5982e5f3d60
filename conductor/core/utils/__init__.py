"""Small shared helpers: identifiers and sorting."""

from .ids import generate_b62_id
from .sorting import collator_key, normalized_sort_key, sort_books

__all__ = ["collator_key", "generate_b62_id", "normalized_sort_key", "sort_books"]
