from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any


def write_ndjson(path: Path, records: Iterable[dict[str, Any]]) -> int:
    """Write records to NDJSON, replacing any existing file.

    The file is written to a temp file in the same directory and renamed into place.
    Returns the number of records written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    n = 0
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for rec in records:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
                n += 1
        Path(tmp_name).replace(path)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return n


def read_ndjson(path: Path) -> list[dict[str, Any]]:
    """Read an NDJSON file into a list of dicts. Blank lines are skipped."""
    if not path.exists():
        raise FileNotFoundError(f"NDJSON not found: {path}")

    out: list[dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path.name}:{lineno}: invalid JSON ({e.msg})") from e
            if not isinstance(obj, dict):
                raise ValueError(f"{path.name}:{lineno}: expected a JSON object, got {type(obj).__name__}")
            out.append(obj)
    return out
