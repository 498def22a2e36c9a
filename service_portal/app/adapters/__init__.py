"""
Adapters package for the Portal Service.

Wraps the hosted data store behind the small ``DataStore`` interface the
repositories use. Adapters map backend failures to ``DataStoreError`` and
keep no state besides their HTTP client.
"""

from .data_store import DataStore, Order, Row
from .supabase_client import SupabaseDataStore

__all__ = [
    "DataStore",
    "Order",
    "Row",
    "SupabaseDataStore",
]
