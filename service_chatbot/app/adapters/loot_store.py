"""
Static ARC loot table loaded from ``data/arc_loot.json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import json

from shared.logging import get_logger


DEFAULT_DATA_FILE = Path(__file__).resolve().parents[3] / "data" / "arc_loot.json"
NOTABLE_RARITIES = ("Epic", "Legendary")


@dataclass(frozen=True)
class LootDrop:
    """One item an ARC can drop."""

    item: str
    rarity: Optional[str] = None


@dataclass(frozen=True)
class LootRecord:
    """Ordered loot list for one ARC, keyed by its upstream id."""

    arc_id: str
    loot: Tuple[LootDrop, ...] = ()

    def notable(self) -> List[LootDrop]:
        """Drops of Epic or Legendary rarity, in listed order."""
        return [drop for drop in self.loot if drop.rarity in NOTABLE_RARITIES]


class LootStore:
    """
    Read-only view over the ARC loot file.

    The file is read once at construction. A missing or malformed file is
    logged and leaves the store empty rather than stopping the process.
    """

    def __init__(self, data_path: Optional[Union[str, Path]] = None):
        self._path = Path(data_path) if data_path else DEFAULT_DATA_FILE
        self.logger = get_logger("chatbot.loot_store")
        self._records: Dict[str, LootRecord] = self._load()

    @property
    def path(self) -> Path:
        """Return the resolved path to the data file."""
        return self._path

    def get(self, arc_id: Optional[str]) -> Optional[LootRecord]:
        if not arc_id:
            return None
        return self._records.get(arc_id)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, arc_id: str) -> bool:
        return arc_id in self._records

    def _load(self) -> Dict[str, LootRecord]:
        """Read JSON payload from disk. Returns an empty table on failure."""
        self.logger.info("Loading ARC loot data", path=str(self._path))
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (ValueError, OSError) as exc:
            self.logger.error("Failed to load ARC loot data", path=str(self._path), error=str(exc))
            return {}

        if not isinstance(payload, dict):
            self.logger.error(
                "ARC loot data must be a JSON object",
                path=str(self._path),
                found=type(payload).__name__,
            )
            return {}

        records = {
            arc_id: LootRecord(arc_id=arc_id, loot=self._parse_loot(value))
            for arc_id, value in payload.items()
        }
        self.logger.info("ARC loot data loaded", arcs=len(records))
        return records

    @staticmethod
    def _parse_loot(value: Any) -> Tuple[LootDrop, ...]:
        if not isinstance(value, dict):
            return ()
        drops = []
        for entry in value.get("loot") or []:
            if isinstance(entry, dict) and entry.get("item"):
                drops.append(LootDrop(item=str(entry["item"]), rarity=entry.get("rarity")))
        return tuple(drops)
