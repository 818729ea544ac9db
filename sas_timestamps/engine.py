"""Deterministic timestamp assignment.

Pipeline (each step is a pure function of the previous one plus EngineConfig):

  raw name -> effective name -> category -> payload -> fraction -> slot
           -> nudge -> offset -> instant

Newer categories sit closer to the base instant. One category block
(slots_per_category * seconds_between_items) separates adjacent categories, so
a name in a higher-priority category is newer than any name in a lower one,
with one exception: the top slot plus a nudge of 1 lands exactly on the next
block's slot 0 with nudge 0 (e.g. "DBG_." and "RAA_" share an offset). The tie
is kept for parity with existing timestamps.

Fidelity notes:
  - The fraction encoder works in float and looks at the first 128 UTF-16
    units only. Both limits are part of the observable behavior; raising the
    precision would move existing names to different slots.
  - Distinct payloads can still land in the same slot. The 0/1 nudge keeps
    outputs from looking identical; it does not resolve collisions.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from .clock import base_instant, epoch_millis, instant_before, iso_local, iso_utc
from .config import (
    APPS_KEY,
    BASE,
    CATEGORY_RULES,
    CHAR_INDEX,
    DEFAULT_CONFIG,
    DEFAULT_KEY,
    MAX_PAYLOAD_UNITS,
    EngineConfig,
)
from .models import Plan


log = logging.getLogger("sas_timestamps.engine")

# Checked after the configurable table, and regardless of its contents.
# Editing the table to drop one of these names does not unmap it.
BUILTIN_EXACT_NAMES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("APP_", ("OSDXMB", "XEBPLUS")),
    ("RAA_", ("RESTART", "POWEROFF")),
    ("RTE_", ("NEUTRINO",)),
    ("SYS_", ("BOOT",)),
    ("ZZY_", ("EXPLOITS",)),
    ("ZZZ_", ("BM", "MATRIXTEAM", "OPL")),
)

# Whitespace and line terminators removed by a JavaScript String.trim().
# Differs from str.strip(): U+FEFF is stripped, U+001C-U+001F and U+0085 are not.
TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193


def _utf16_units(s: str) -> list[int]:
    data = s.encode("utf-16-le", "surrogatepass")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def _prefixed(key: str, name: str) -> str:
    return APPS_KEY if key == APPS_KEY else key + name


def normalize_effective_name(name: str | None, config: EngineConfig = DEFAULT_CONFIG) -> str:
    """Canonical, category-prefixed name used by every later step."""

    n = (name or "").strip(TRIM_CHARS).upper()

    for key in config.category_order:
        if n in config.unprefixed.get(key, ()):
            return _prefixed(key, n)

    for key, names in BUILTIN_EXACT_NAMES:
        if n in names:
            return _prefixed(key, n)

    # Either already prefixed or a DEFAULT member.
    return n


def category_key(effective: str) -> str:
    for rule in CATEGORY_RULES:
        if rule.matches(effective):
            return rule.key
    return DEFAULT_KEY


def category_label(key: str) -> str:
    if key in (DEFAULT_KEY, APPS_KEY):
        return key
    return f"{key}*"


def payload_for_effective(effective: str, key: str) -> str:
    """Ordering payload: category prefix removed, dashes ignored."""

    if key == APPS_KEY:
        return APPS_KEY
    if key == DEFAULT_KEY:
        return effective.replace("-", "")
    payload = effective[len(key):] if effective.startswith(key) else effective
    return payload.replace("-", "")


def lex_fraction(payload: str) -> float:
    """Map a payload to a fraction preserving lexicographic order over CHARSET.

    Usually in [0, 1); max-rank characters can reach or pass 1, which the slot
    assigner clamps.
    """

    total = 0.0
    scale = 1.0
    for unit in _utf16_units(payload.upper())[:MAX_PAYLOAD_UNITS]:
        scale *= BASE
        code = CHAR_INDEX.get(chr(unit), BASE - 1)
        total += (code + 1) / scale
    return total


def slot_for_fraction(fraction: float, slots_per_category: int) -> int:
    slot = math.floor(fraction * slots_per_category)
    if slot >= slots_per_category:
        slot = slots_per_category - 1
    return slot


def stable_hash01(s: str) -> int:
    """FNV-1a (32-bit) over UTF-16 units, reduced to its low bit."""

    h = FNV_OFFSET_BASIS
    for unit in _utf16_units(s):
        h ^= unit
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h & 1


def compose_offset(category_index: int, slot: int, nudge: int, config: EngineConfig = DEFAULT_CONFIG) -> int:
    category_offset = category_index * config.category_block_seconds
    name_offset = slot * config.seconds_between_items + nudge
    return category_offset + name_offset


def plan(name: str | None, config: EngineConfig = DEFAULT_CONFIG) -> Plan:
    """Compute the full timestamp plan for ``name``. Never raises for strings."""

    effective = normalize_effective_name(name, config)
    key = category_key(effective)
    index = config.category_index[key]
    payload = payload_for_effective(effective, key)
    slot = slot_for_fraction(lex_fraction(payload), config.slots_per_category)
    nudge = stable_hash01(effective)
    offset = compose_offset(index, slot, nudge, config)

    instant = instant_before(base_instant(config), offset)
    result = Plan(
        input=name or "",
        effective_name=effective,
        category=category_label(key),
        category_key=key,
        category_index=index,
        slot=slot,
        offset_seconds=offset,
        payload_used=payload,
        timestamp=instant,
        iso_local=iso_local(instant, config.timezone),
        iso_utc=iso_utc(instant),
        epoch_millis=epoch_millis(instant),
    )
    log.debug("plan %r -> %s slot=%d offset=%ds", name, effective, slot, offset)
    return result


def order_names(names: Iterable[str], config: EngineConfig = DEFAULT_CONFIG) -> list[Plan]:
    """Plan every non-blank name and list them newest -> oldest."""

    plans = [plan(n, config) for n in names if n and n.strip(TRIM_CHARS)]
    return sorted(plans, key=lambda p: (-p.epoch_millis, p.effective_name))
