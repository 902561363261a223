"""Runtime helpers for recording which functions execute during a run."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Optional, Set

_LOCK = threading.RLock()
# Names already written this process; avoids rewriting the file on hot paths.
_SEEN: Set[str] = set()
_LOADED_FROM: Optional[Path] = None


def tracking_file() -> Optional[Path]:
    """Return the destination file, or ``None`` when tracking is disabled."""

    raw = os.getenv("FUNCTION_TRACKING_FILE", "logs/functions_in_use.txt").strip()
    if not raw or raw.lower() in {"0", "off", "false", "none"}:
        return None
    return Path(raw)


def _initialize_seen_cache(path: Path) -> None:
    global _LOADED_FROM
    if _LOADED_FROM == path:
        return
    _LOADED_FROM = path
    _SEEN.clear()
    if not path.exists():
        return
    try:
        with path.open("r", encoding="utf-8") as handle:
            _SEEN.update(line.strip() for line in handle if line.strip())
    except OSError:
        # Unreadable file: start with an empty cache.
        pass


def t(func_name: str) -> None:
    """Record the provided function name the first time it runs."""
    if not func_name:
        return

    path = tracking_file()
    if path is None:
        return

    with _LOCK:
        _initialize_seen_cache(path)
        if func_name in _SEEN:
            return

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as handle:
                handle.write(f"{func_name}\n")
        except OSError:
            return

        _SEEN.add(func_name)


def seen_functions() -> Set[str]:
    """Return a copy of the names recorded so far in this process."""

    with _LOCK:
        return set(_SEEN)
