from __future__ import annotations

import logging


def setup_logging(*, environment: str, level: str | None = None) -> None:
    """Configure engine logging.

    - Dev: console logs, DEBUG level.
    - Prod: console logs, INFO level.

    An explicit ``level`` name wins over the environment default. Safe to call
    multiple times (won't double-add handlers).
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or "development").lower().strip()
    resolved = logging.INFO if env == "production" else logging.DEBUG
    if level:
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler()
    console.setLevel(resolved)
    console.setFormatter(formatter)

    logging.basicConfig(level=resolved, handlers=[console])

    # Encoder libraries are chatty at DEBUG.
    logging.getLogger("reportlab").setLevel(max(resolved, logging.INFO))
    logging.getLogger("openpyxl").setLevel(max(resolved, logging.INFO))
