"""Static tables and constants for timestamp assignment.

Everything here is immutable once built. The server builds one EngineConfig at
startup (optionally from environment variables) and passes it to every plan.

Environment:
  SAS_TIMEZONE               IANA zone for the base instant (default: host local)
  SAS_SLOTS_PER_CATEGORY     slots in one category block (default: 86400)
  SAS_SECONDS_BETWEEN_ITEMS  seconds per slot (default: 1)
  SAS_UNPREFIXED             "APP_=OSDXMB, XEBPLUS; RAA_=RESTART"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ConfigError


SECONDS_BETWEEN_ITEMS = 1
# One day of seconds per category.
SLOTS_PER_CATEGORY = 86_400

DEFAULT_KEY = "DEFAULT"
APPS_KEY = "APPS"

# Newest -> oldest.
CATEGORY_ORDER: tuple[str, ...] = (
    "APP_",
    "APPS",
    "PS1_",
    "EMU_",
    "GME_",
    "DST_",
    "DBG_",
    "RAA_",
    "RTE_",
    DEFAULT_KEY,
    "SYS_",
    "ZZY_",
    "ZZZ_",
)

# Exact (unprefixed) names that belong to a category anyway.
UNPREFIXED_IN_CATEGORY: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "APP_": frozenset({"OSDXMB", "XEBPLUS"}),
        "APPS": frozenset(),
        "PS1_": frozenset(),
        "EMU_": frozenset(),
        "GME_": frozenset(),
        "DST_": frozenset(),
        "DBG_": frozenset(),
        "RAA_": frozenset({"RESTART", "POWEROFF"}),
        "RTE_": frozenset({"NEUTRINO"}),
        "SYS_": frozenset({"BOOT"}),
        "ZZY_": frozenset({"EXPLOITS"}),
        "ZZZ_": frozenset({"BM", "MATRIXTEAM", "OPL"}),
    }
)

CHARSET = " 0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_-."
CHAR_INDEX: Mapping[str, int] = MappingProxyType({ch: i for i, ch in enumerate(CHARSET)})
BASE = len(CHARSET)

# Characters past this position do not influence ordering.
MAX_PAYLOAD_UNITS = 128

# Base instant, as local civil time.
BASE_LOCAL = (2098, 12, 31, 23, 59, 59)

# Worst-case offset must keep every instant at or after year 1000, for any
# zone (the day of slack covers UTC+14).
EARLIEST_INSTANT = datetime(1000, 1, 1, tzinfo=timezone.utc)
MAX_OFFSET_SECONDS = (
    datetime(*BASE_LOCAL, tzinfo=timezone.utc) - timedelta(days=1) - EARLIEST_INSTANT
) // timedelta(seconds=1)


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """One first-match classification rule."""

    key: str
    prefix: str | None = None
    exact: tuple[str, ...] = ()

    def matches(self, effective: str) -> bool:
        if self.prefix is not None and effective.startswith(self.prefix):
            return True
        return effective in self.exact


# Order matters: evaluated top to bottom, first match wins.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("APP_", prefix="APP_"),
    CategoryRule("APPS", exact=("APPS",)),
    CategoryRule("PS1_", prefix="PS1_"),
    CategoryRule("EMU_", prefix="EMU_"),
    CategoryRule("GME_", prefix="GME_"),
    CategoryRule("DST_", prefix="DST_"),
    CategoryRule("DBG_", prefix="DBG_"),
    CategoryRule("RAA_", prefix="RAA_"),
    CategoryRule("RTE_", prefix="RTE_"),
    CategoryRule("SYS_", prefix="SYS_", exact=("SYS",)),
    CategoryRule("ZZY_", prefix="ZZY_"),
    CategoryRule("ZZZ_", prefix="ZZZ_"),
)


@dataclass(frozen=True)
class EngineConfig:
    """Validated bundle of everything a plan depends on."""

    category_order: tuple[str, ...] = CATEGORY_ORDER
    unprefixed: Mapping[str, frozenset[str]] = field(default_factory=lambda: UNPREFIXED_IN_CATEGORY)
    slots_per_category: int = SLOTS_PER_CATEGORY
    seconds_between_items: int = SECONDS_BETWEEN_ITEMS
    timezone: str | None = None

    def __post_init__(self) -> None:
        order = tuple(self.category_order)
        object.__setattr__(self, "category_order", order)
        object.__setattr__(
            self,
            "unprefixed",
            MappingProxyType({k: frozenset(v) for k, v in self.unprefixed.items()}),
        )

        if len(set(order)) != len(order):
            raise ConfigError("category_order contains duplicate keys")
        if DEFAULT_KEY not in order:
            raise ConfigError(f"category_order must contain {DEFAULT_KEY!r}")
        for rule in CATEGORY_RULES:
            if rule.key not in order:
                raise ConfigError(f"category rule key {rule.key!r} missing from category_order")
        for key in self.unprefixed:
            if key not in order or key == DEFAULT_KEY:
                raise ConfigError(f"unprefixed names given for unknown category {key!r}")
        if self.slots_per_category <= 0:
            raise ConfigError("slots_per_category must be positive")
        if self.seconds_between_items <= 0:
            raise ConfigError("seconds_between_items must be positive")
        if len(order) * self.category_block_seconds > MAX_OFFSET_SECONDS:
            raise ConfigError(
                f"slots_per_category * seconds_between_items too large for {len(order)} categories; "
                f"offsets may not exceed {MAX_OFFSET_SECONDS} seconds"
            )
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ConfigError(f"unknown timezone {self.timezone!r}") from exc

    @property
    def category_index(self) -> Mapping[str, int]:
        return {key: idx for idx, key in enumerate(self.category_order)}

    @property
    def category_block_seconds(self) -> int:
        return self.slots_per_category * self.seconds_between_items


DEFAULT_CONFIG = EngineConfig()


def parse_name_csv(text: str) -> frozenset[str]:
    """``"osdxmb, XEBPLUS ,"`` -> ``{"OSDXMB", "XEBPLUS"}``."""

    return frozenset(x.strip().upper() for x in text.split(",") if x.strip())


def parse_unprefixed(text: str) -> dict[str, frozenset[str]]:
    """Parse ``KEY=NAME, NAME; KEY=NAME`` into per-category name sets."""

    out: dict[str, frozenset[str]] = {}
    for chunk in text.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, names = chunk.partition("=")
        key = key.strip().upper()
        if not sep or not key:
            raise ConfigError(f"malformed unprefixed entry {chunk!r}; expected KEY=NAME,NAME")
        out[key] = parse_name_csv(names)
    return out


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def config_from_env(env: Mapping[str, str] | None = None) -> EngineConfig:
    """Build an EngineConfig from SAS_* environment variables."""

    env = os.environ if env is None else env

    unprefixed = dict(UNPREFIXED_IN_CATEGORY)
    raw_unprefixed = env.get("SAS_UNPREFIXED") or ""
    if raw_unprefixed.strip():
        unprefixed.update(parse_unprefixed(raw_unprefixed))

    zone = (env.get("SAS_TIMEZONE") or "").strip() or None

    return EngineConfig(
        unprefixed=unprefixed,
        slots_per_category=_int_env(env, "SAS_SLOTS_PER_CATEGORY", SLOTS_PER_CATEGORY),
        seconds_between_items=_int_env(env, "SAS_SECONDS_BETWEEN_ITEMS", SECONDS_BETWEEN_ITEMS),
        timezone=zone,
    )
