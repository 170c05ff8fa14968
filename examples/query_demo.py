"""
examples/query_demo.py

Demonstrates using Emission Lines DB programmatically after you have ingested
the emission-line table and built the local DuckDB.

Run from repo root (venv active):

    python examples/query_demo.py

You should have already done:

    python scripts/ingest_table.py --html path/to/saved_table.html

This script demonstrates:
- Greek alias search ("Ha" finds Hα)
- switching between the vacuum and air wavelength scales
- the common-lines filter combined with a wavelength window and a sort
- exporting a JSON bundle and a pandas DataFrame
"""

from __future__ import annotations

import json
from pathlib import Path

from emission_lines_db.query import QuerySpec, open_default_api
from emission_lines_db.query.export import export_query_bundle, result_to_dataframe
from emission_lines_db.util.airvac import format_wavelength


def _print_rows(result, limit: int = 10) -> None:
    for view in result.rows[:limit]:
        mark = "*" if view.converted else " "
        common = "●" if view.is_common else " "
        print(f"  {format_wavelength(view.display_wavelength):>10}{mark} {common} {view.line.ion:<10} {view.line.transition_type}")
    print(f"  {result.summary()}")


def main() -> None:
    api = open_default_api()

    # 1) Alias search: the trailing "a" of "Ha" is also tried as α
    print("\n=== search 'Ha' (vacuum scale) ===")
    _print_rows(api.query(search_text="Ha"))

    # 2) Same query on the air scale; converted values are starred
    print("\n=== search 'Ha' (air scale) ===")
    _print_rows(api.query(search_text="Ha", show_vacuum=False))

    # 3) Common optical lines, strongest ionization first
    spec = QuerySpec(wavelength_min="3500", wavelength_max="7000", common_only=True, sort_key="ionizationPotential", sort_direction="desc")
    print("\n=== common lines 3500-7000 Å by IP (desc) ===")
    _print_rows(api.query(spec, show_vacuum=False))

    # 4) Export a JSON bundle and a DataFrame for the same query
    bundle = export_query_bundle(api=api, spec=spec, show_vacuum=False)
    out_path = Path("query_bundle.json")
    out_path.write_text(json.dumps(bundle, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"\nWrote JSON bundle to: {out_path.resolve()}")

    df = result_to_dataframe(api.query(spec, show_vacuum=False))
    print(df[["displayWavelength", "ion", "ionizationPotential"]].head())


if __name__ == "__main__":
    main()
