"""Append-only debug log shared by the engine and the terminal shell."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pos_terminal import config


def log_debug(message: str) -> None:
    try:
        ts = datetime.now(timezone.utc).isoformat()
        log_path = Path(config.DEBUG_LOG_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as fh:
            fh.write(f"{ts} {message}\n")
    except Exception:
        # Logging must never interfere with terminal flow.
        return
