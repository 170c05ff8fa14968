from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import pandas as pd

from emission_lines_db.query.api import QueryAPI, open_default_api
from emission_lines_db.query.engine import QueryResult, QuerySpec
from emission_lines_db.scrapers.emission_table.normalize_lines import RECORD_FIELDS, line_to_record

VIEW_COLUMNS = [*RECORD_FIELDS, "isVacuum", "displayWavelength", "isCommon", "converted"]


def result_to_records(result: QueryResult) -> list[dict[str, Any]]:
    """
    JSON-serializable rows of a query result.

    Each row is the stored record (camelCase keys) plus the per-query fields
    displayWavelength, isCommon and converted.
    """
    out: list[dict[str, Any]] = []
    for view in result.rows:
        rec = line_to_record(view.line)
        rec["displayWavelength"] = view.display_wavelength
        rec["isCommon"] = view.is_common
        rec["converted"] = view.converted
        out.append(rec)
    return out


def result_to_dataframe(result: QueryResult) -> pd.DataFrame:
    """Query result as a DataFrame (one row per matched line, display order kept)."""
    records = result_to_records(result)
    if not records:
        return pd.DataFrame(columns=VIEW_COLUMNS)
    return pd.DataFrame.from_records(records, columns=VIEW_COLUMNS)


def export_query_bundle(
    *,
    api: QueryAPI | None = None,
    spec: QuerySpec | None = None,
    show_vacuum: bool = True,
) -> dict[str, Any]:
    """
    Export a machine-friendly JSON bundle for one query.

    Args:
        api: Dataset to query. Defaults to open_default_api().
        spec: Query parameters. Defaults to an unfiltered, wavelength-sorted view.
        show_vacuum: Display scale for wavelengths (True = vacuum, False = air).

    Returns:
        A dict containing:
            - `query`: the QuerySpec fields
            - `showVacuum`, `matchedCount`, `totalCount`
            - `lines`: rows as produced by result_to_records()
    """
    if api is None:
        api = open_default_api()
    result = api.query(spec, show_vacuum=show_vacuum)

    return {
        "query": asdict(result.spec),
        "showVacuum": result.show_vacuum,
        "matchedCount": result.matched_count,
        "totalCount": result.total_count,
        "lines": result_to_records(result),
    }


if __name__ == "__main__":
    # Small demo against the default dataset
    bundle = export_query_bundle(spec=QuerySpec(search_text="Ha", common_only=True))
    print(json.dumps(bundle, indent=2, ensure_ascii=False))
