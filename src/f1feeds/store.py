"""Reading the previous snapshot and atomically replacing it."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from f1feeds.differ import PreviousSnapshot

logger = logging.getLogger(__name__)


def read_document(path: str | os.PathLike[str]) -> Any:
    """Parse the JSON file at *path*; None when it does not exist or is unreadable."""
    target = Path(path)
    if not target.exists():
        return None
    try:
        return json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read previous snapshot %s: %s", target, exc)
        return None


def load_previous(path: str | os.PathLike[str]) -> PreviousSnapshot:
    return PreviousSnapshot.from_document(read_document(path))


def dumps(doc: Any) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False) + "\n"


def write_snapshot(path: str | os.PathLike[str], doc: Any) -> Path:
    """Write *doc* next to *path* and rename it into place.

    Readers see either the old file or the complete new one.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = dumps(doc)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info("Wrote %s (%d bytes)", target, len(payload.encode("utf-8")))
    return target
