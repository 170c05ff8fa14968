"""emission_lines_db package.

Emission-lines-DB is a local-first table of UV/optical emission lines (700-11000 Å)
with a query engine for filtering and sorting them on either wavelength scale.

Key ideas:
- Reproducible ingestion pipeline: HTML table → normalize (NDJSON) → bootstrap (DuckDB) → query
- Wavelengths are stored as tabulated (vacuum below 2000 Å, air above) and converted
  per query to the scale the caller asks for.

Public API:
- emission_lines_db.query.open_default_api
- emission_lines_db.query.api.QueryAPI
- Convenience helpers:
  - emission_lines_db.get_emission_lines
  - emission_lines_db.get_line_by_id
"""

from __future__ import annotations

from emission_lines_db.db_query import get_emission_lines, get_line_by_id

__all__ = [
    "__version__",
    "get_emission_lines",
    "get_line_by_id",
]

__version__ = "0.1.0"
