# scripts/ingest_table.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from emission_lines_db.db.duckdb_store import DuckDBStore
from emission_lines_db.scrapers.common.ndjson import write_ndjson
from emission_lines_db.scrapers.emission_table.normalize_lines import line_to_record, normalize_rows, summarize_lines
from emission_lines_db.scrapers.emission_table.parse_table import parse_table_file
from emission_lines_db.util.paths import get_paths


def main() -> None:
    ap = argparse.ArgumentParser(description="Scrape the emission-line HTML table, normalize it and bootstrap the DuckDB file.")
    ap.add_argument(
        "--html",
        type=Path,
        default=None,
        help="Saved HTML page containing the table. Defaults to data/raw/emission_lines.html.",
    )
    ap.add_argument("--table-index", type=int, default=0, help="Which <table> in the page to read.")
    ap.add_argument(
        "--ndjson",
        type=Path,
        default=None,
        help="Normalized NDJSON output. Defaults to data/normalized/emission_lines.ndjson.",
    )
    ap.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="Output DuckDB path. Defaults to data/db/emission_lines.duckdb.",
    )
    ap.add_argument("--no-db", action="store_true", help="Only write NDJSON; skip the DuckDB bootstrap.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging (lists dropped rows).")

    args = ap.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    paths = get_paths()
    html_path = args.html or paths.default_source_html_path
    ndjson_path = args.ndjson or paths.default_ndjson_path
    db_path = args.db_path or paths.default_duckdb_path

    if not html_path.exists():
        raise SystemExit(f"Source HTML not found: {html_path}\nSave the emission-line table page there or pass --html.")

    rows = parse_table_file(html_path, table_index=args.table_index)
    lines = normalize_rows(rows)
    n = write_ndjson(ndjson_path, (line_to_record(ln) for ln in lines))
    print(f"Parsed {n} emission lines from {len(rows)} table rows")
    print(f"Written to {ndjson_path}")

    if not args.no_db:
        store = DuckDBStore(db_path=db_path)
        loaded = store.bootstrap_from_ndjson(ndjson_path, truncate=True)
        print(f"Bootstrapped {db_path} ({loaded} rows)")

    stats = summarize_lines(lines)
    print(f"\nUnique ions: {stats['n_ions']}")
    if stats["n_lines"]:
        print(f"Wavelength range: {stats['wavelength_min']} - {stats['wavelength_max']} Å")
        print(f"Vacuum-scale lines (< 2000 Å): {stats['n_vacuum']}")
        print("\nFirst entries:")
        for wav, ion in stats["first"]:
            print(f"  {wav} Å - {ion}")


if __name__ == "__main__":
    main()
