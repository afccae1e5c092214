"""
Storage adapters for claim cards.
"""

from claimcards.services.storage.memory_store import InMemoryClaimCardStore
from claimcards.services.storage.sqlite_store import SQLiteClaimCardStore

__all__ = ["InMemoryClaimCardStore", "SQLiteClaimCardStore"]
