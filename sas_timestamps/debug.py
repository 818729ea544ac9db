"""Debug helpers.

The service can optionally include additional debug metadata in plan
responses (raw fraction, nudge bit, base instant). Strict clients that reject
unknown JSON properties should leave this off.

Enable with:
  SAS_DEBUG=1
"""

from __future__ import annotations

import os


def truthy(value: str | None) -> bool:
    v = (value or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def debug_enabled() -> bool:
    return truthy(os.getenv("SAS_DEBUG"))
