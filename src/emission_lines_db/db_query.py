# src/emission_lines_db/db_query.py
from __future__ import annotations

from typing import Any

from emission_lines_db.query import open_default_api
from emission_lines_db.query.engine import QuerySpec
from emission_lines_db.query.export import result_to_records
from emission_lines_db.scrapers.emission_table.normalize_lines import line_to_record


def get_emission_lines(
    search: str = "",
    *,
    min_wav: float | str | None = None,
    max_wav: float | str | None = None,
    common_only: bool = False,
    sort_key: str = "wavelength",
    descending: bool = False,
    show_vacuum: bool = True,
    limit: int | None = None,
) -> dict[str, Any]:
    """
    Convenience: query the default dataset and return a JSON-friendly dict.

    search:
        Free text matched against ion, configurations and references.
        Greek aliases apply to the end of the text ("Ha" -> "Hα", "Lyb" -> "Lyβ").
    min_wav / max_wav:
        Inclusive bounds (Angstrom) on the *displayed* wavelength, i.e. after
        conversion to the scale selected by show_vacuum.
    limit:
        Truncate the returned lines; matchedCount still reports the full match count.
    """
    api = open_default_api()
    spec = QuerySpec(
        search_text=search,
        wavelength_min=min_wav,
        wavelength_max=max_wav,
        common_only=common_only,
        sort_key=sort_key,
        sort_direction="desc" if descending else "asc",
    )
    result = api.query(spec, show_vacuum=show_vacuum)
    lines = result_to_records(result)
    if limit is not None:
        lines = lines[: max(0, int(limit))]

    return {
        "query": search,
        "showVacuum": result.show_vacuum,
        "matchedCount": result.matched_count,
        "totalCount": result.total_count,
        "lines": lines,
    }


def get_line_by_id(line_id: int) -> dict[str, Any]:
    """Convenience: fetch one canonical record by id."""
    api = open_default_api()
    line = api.get_line(line_id)
    if line is None:
        raise ValueError(f"No emission line with id={line_id!r}")
    return line_to_record(line)


__all__ = [
    "get_emission_lines",
    "get_line_by_id",
]
