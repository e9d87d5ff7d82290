"""Catalog entities and store access ports.

The engine only reads through the `RecommendationStore` port. The
`InMemoryStore` adapter backs it with pandas DataFrames loaded from CSV.
"""

from cartwise.store.memory import InMemoryStore, load_store_from_csv_dir
from cartwise.store.ports import RecommendationStore

__all__ = ["InMemoryStore", "RecommendationStore", "load_store_from_csv_dir"]
