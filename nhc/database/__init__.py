"""NHC database helpers."""

from nhc.database.indexes import COLLECTION_INDEXES, ensure_indexes

__all__ = [
    "COLLECTION_INDEXES",
    "ensure_indexes",
]
