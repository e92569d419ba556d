"""
Name resolution for chat queries.

- entity_resolver: first case-insensitive substring match over upstream lists
- maps: static map table with alias index
- map_resolver: ``<map>-<level>`` token parsing with partial-match fallback
"""

from .entity_resolver import resolve_entity
from .maps import MAPS, MapEntry, MapTable
from .map_resolver import MapResolution, resolve_level, resolve_map_token

__all__ = [
    "resolve_entity",
    "MAPS",
    "MapEntry",
    "MapTable",
    "MapResolution",
    "resolve_level",
    "resolve_map_token",
]
