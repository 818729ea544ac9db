"""Plan record returned by the engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Plan:
    """Deterministic timestamp assignment for one name.

    - timestamp: absolute instant (timezone-aware, UTC)
    - offset_seconds: how far before the base instant the name lands
    - payload_used: the category-stripped, dash-stripped ordering string
    """

    input: str
    effective_name: str
    category: str
    category_key: str
    category_index: int
    slot: int
    offset_seconds: int
    payload_used: str
    timestamp: datetime
    iso_local: str
    iso_utc: str
    epoch_millis: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "input": self.input,
            "effectiveName": self.effective_name,
            "category": self.category,
            "categoryKey": self.category_key,
            "categoryIndex": self.category_index,
            "slot": self.slot,
            "offsetSeconds": self.offset_seconds,
            "payloadUsed": self.payload_used,
            "isoLocal": self.iso_local,
            "isoUTC": self.iso_utc,
            "epochMillis": self.epoch_millis,
        }
