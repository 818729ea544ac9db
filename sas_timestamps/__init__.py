"""SAS timestamps: deterministic fake timestamps for folder names.

The engine (``sas_timestamps.engine``) is pure; ``sas_timestamps.server``
exposes it over HTTP as ``GET /api?name=<FOLDER>``.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
