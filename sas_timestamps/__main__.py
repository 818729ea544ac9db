"""Module entrypoint for the timestamp service.

Starts the FastAPI/uvicorn server. Engine tables are read from SAS_* variables
once, when the app is created (see ``sas_timestamps.config``).
"""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    host = os.getenv("SAS_HOST", "0.0.0.0")
    port = int(os.getenv("SAS_PORT", "8080"))
    log_level = os.getenv("SAS_LOG_LEVEL", "info").lower()

    uvicorn.run(
        "sas_timestamps.server:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
        # Often served behind a static-site proxy or tunnel.
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
