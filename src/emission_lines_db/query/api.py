# src/emission_lines_db/query/api.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from emission_lines_db.db.duckdb_store import DuckDBStore
from emission_lines_db.query.engine import QueryResult, QuerySpec, run_query
from emission_lines_db.scrapers.common.ndjson import read_ndjson
from emission_lines_db.scrapers.emission_table.normalize_lines import EmissionLine, line_from_record
from emission_lines_db.util.paths import get_paths

logger = logging.getLogger(__name__)

_SPEC_FIELDS = frozenset(QuerySpec.__dataclass_fields__)


@dataclass(frozen=True)
class QueryAPI:
    """Query helpers over the in-memory canonical set of emission lines."""

    lines: tuple[EmissionLine, ...]

    @classmethod
    def from_lines(cls, lines: Iterable[EmissionLine]) -> QueryAPI:
        return cls(lines=tuple(lines))

    @classmethod
    def from_store(cls, store: DuckDBStore) -> QueryAPI:
        return cls.from_lines(store.read_lines())

    @classmethod
    def from_ndjson(cls, path: Path) -> QueryAPI:
        return cls.from_lines(line_from_record(rec) for rec in read_ndjson(path))

    @property
    def total_count(self) -> int:
        return len(self.lines)

    def get_line(self, line_id: int) -> EmissionLine | None:
        # ids are dense and 1-based in canonical order, so try the direct slot first
        if 1 <= line_id <= len(self.lines) and self.lines[line_id - 1].id == line_id:
            return self.lines[line_id - 1]
        for ln in self.lines:
            if ln.id == line_id:
                return ln
        return None

    def query(self, spec: QuerySpec | None = None, *, show_vacuum: bool = True, **overrides: Any) -> QueryResult:
        """
        Run one query over the canonical set.

        Keyword overrides are QuerySpec fields, e.g.:
            api.query(search_text="Ha", wavelength_min=6000, sort_key="ion")
        """
        spec = spec or QuerySpec()
        if overrides:
            unknown = set(overrides) - _SPEC_FIELDS
            if unknown:
                raise TypeError(f"Unknown query parameter(s): {sorted(unknown)}")
            spec = replace(spec, **overrides)
        return run_query(self.lines, spec, show_vacuum=show_vacuum)


def open_default_api(*, db_path: Path | None = None, ndjson_path: Path | None = None) -> QueryAPI:
    """
    Load the default dataset and return a QueryAPI.

    - data/db/emission_lines.duckdb is used if present
    - otherwise it is bootstrapped from data/normalized/emission_lines.ndjson
    """
    paths = get_paths()
    db_path = db_path or paths.default_duckdb_path
    ndjson_path = ndjson_path or paths.default_ndjson_path

    store = DuckDBStore(db_path=db_path)
    if not db_path.exists():
        if not ndjson_path.exists():
            raise FileNotFoundError(f"No emission-line database at {db_path} and no normalized NDJSON at {ndjson_path}.\nRun scripts/ingest_table.py on the source HTML table first.")
        logger.info("bootstrapping %s from %s", db_path, ndjson_path)
        try:
            store.bootstrap_from_ndjson(ndjson_path)
        except Exception:
            # a half-built file would otherwise be read back as an empty dataset
            db_path.unlink(missing_ok=True)
            db_path.with_name(db_path.name + ".wal").unlink(missing_ok=True)
            raise

    return QueryAPI.from_store(store)
