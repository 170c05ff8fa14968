# src/emission_lines_db/db/duckdb_store.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import duckdb

from emission_lines_db.scrapers.common.ndjson import read_ndjson
from emission_lines_db.scrapers.emission_table.normalize_lines import EmissionLine, line_from_record

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"

# Table columns in insert/select order. is_vacuum is written for SQL consumers
# and never read back (EmissionLine derives it from wavelength).
_LINE_COLUMNS: list[str] = [
    "id",
    "wavelength",
    "wavelength_original",
    "is_vacuum",
    "ion",
    "energy_initial",
    "energy_final",
    "configurations",
    "terms",
    "j_transition",
    "transition_type",
    "ionization_potential",
    "references",
    "note",
]


def _qident(name: str) -> str:
    """Quote an identifier for DuckDB SQL (table/column names)."""
    return '"' + name.replace('"', '""') + '"'


def _line_params(line: EmissionLine) -> list[object]:
    return [line.is_vacuum if col == "is_vacuum" else getattr(line, col) for col in _LINE_COLUMNS]


@dataclass
class DuckDBStore:
    db_path: Path

    def connect(self) -> duckdb.DuckDBPyConnection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return duckdb.connect(str(self.db_path))

    def _require_db(self) -> None:
        if not self.db_path.exists():
            raise FileNotFoundError(f"DuckDB file not found: {self.db_path}")

    def init_schema(self) -> None:
        """Create tables (idempotent) and record the schema version in meta_info."""
        sql = (Path(__file__).resolve().parent / "schema.sql").read_text(encoding="utf-8")

        with self.connect() as con:
            con.execute(sql)
            con.execute(
                "INSERT OR REPLACE INTO meta_info(key, value) VALUES (?, ?)",
                ["schema_version", SCHEMA_VERSION],
            )

    def write_lines(self, lines: Iterable[EmissionLine], *, truncate: bool = True) -> int:
        """Insert canonical lines. With truncate=True the table is replaced wholesale."""
        self.init_schema()
        params = [_line_params(ln) for ln in lines]

        cols_sql = ", ".join(_qident(c) for c in _LINE_COLUMNS)
        placeholders = ", ".join("?" for _ in _LINE_COLUMNS)

        with self.connect() as con:
            con.execute("BEGIN TRANSACTION")
            try:
                if truncate:
                    con.execute("DELETE FROM emission_lines")
                if params:
                    con.executemany(f"INSERT INTO emission_lines ({cols_sql}) VALUES ({placeholders})", params)
                con.execute("COMMIT")
            except Exception:
                con.execute("ROLLBACK")
                raise

        logger.info("wrote %d emission lines to %s", len(params), self.db_path)
        return len(params)

    def read_lines(self) -> list[EmissionLine]:
        """Load the canonical set, ordered by id."""
        self._require_db()
        cols = [c for c in _LINE_COLUMNS if c != "is_vacuum"]
        cols_sql = ", ".join(_qident(c) for c in cols)

        with self.connect() as con:
            rows = con.execute(f"SELECT {cols_sql} FROM emission_lines ORDER BY id").fetchall()

        out: list[EmissionLine] = []
        for r in rows:
            kw = dict(zip(cols, r, strict=True))
            for text_col in ("wavelength_original", "ion", "configurations", "terms", "j_transition", "references", "note"):
                if kw[text_col] is None:
                    kw[text_col] = ""
            if not kw["transition_type"]:
                kw["transition_type"] = "E1"
            out.append(EmissionLine(**kw))
        return out

    def count_lines(self) -> int:
        self._require_db()
        with self.connect() as con:
            row = con.execute("SELECT count(*) FROM emission_lines").fetchone()
        return int(row[0]) if row else 0

    def bootstrap_from_ndjson(self, ndjson_path: Path, *, truncate: bool = True) -> int:
        """Load the normalized NDJSON file into the emission_lines table."""
        lines = [line_from_record(rec) for rec in read_ndjson(ndjson_path)]
        return self.write_lines(lines, truncate=truncate)
