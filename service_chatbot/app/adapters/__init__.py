"""
Adapters package for the chat gateway.

Contains the boundary to things outside the process:

- MetaForgeClient: single-attempt, time-bounded HTTP client for the
  upstream game-data API
- LootStore: static ARC loot table read from disk at startup

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .metaforge_client import MetaForgeClient, unwrap_envelope
from .loot_store import LootDrop, LootRecord, LootStore

__all__ = [
    "MetaForgeClient",
    "unwrap_envelope",
    "LootDrop",
    "LootRecord",
    "LootStore",
]
