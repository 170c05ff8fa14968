from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from emission_lines_db.query import QuerySpec, open_default_api
from emission_lines_db.query.export import export_query_bundle
from emission_lines_db.scrapers.emission_table.normalize_lines import line_to_record
from emission_lines_db.util.airvac import format_wavelength

"""
Emission Lines Query CLI
========================

Interactive/verification querying of the local emission-line table.
Supports a human-readable table and machine-friendly JSON export.

Wavelength scale
----------------
The source table quotes vacuum wavelengths below 2000 Å and air wavelengths above.
By default everything is shown on the vacuum scale; pass --air for air.
Converted values are marked with '*'. Range bounds apply to the displayed value.

Searching
---------
--search matches ion, configurations and references (case-insensitive).
A trailing Roman alias is also tried as a Greek letter:
  "Ha"  -> Hα      "Lyb" -> Lyβ      "Hgamma" -> Hγ

Commands
--------
lines [--search TEXT] [--min-wav A] [--max-wav B] [--common-only]
      [--sort KEY] [--desc] [--air] [--limit N] [--columns LIST]
    Print matching lines as an aligned table, followed by "Showing N of M lines".

show <id>
    Print one canonical record as JSON.

export [same filters as lines] [--out PATH]
    Emit a JSON bundle (query, counts, rows). Prints to stdout if --out is omitted.

Examples
--------
python scripts/query.py lines --search "[O III]"
python scripts/query.py lines --min-wav 6500 --max-wav 6600 --air --sort ion
python scripts/query.py lines --common-only --sort ionizationPotential --desc
python scripts/query.py export --search Ha --out ha.json
"""

# Column key -> (header, align)
_COLUMNS: dict[str, tuple[str, str]] = {
    "Wavelength": ("λ (Å)", "r"),
    "Ion": ("Ion", "l"),
    "Ei": ("Ei (eV)", "r"),
    "Ek": ("Ek (eV)", "r"),
    "Config": ("Configurations", "l"),
    "Terms": ("Terms", "l"),
    "J": ("Ji - Jk", "l"),
    "Type": ("Type", "l"),
    "IP": ("IP (eV)", "r"),
    "Refs": ("Refs", "l"),
}
_DEFAULT_COLUMNS = ["Wavelength", "Ion", "Ei", "Ek", "Config", "Terms", "J", "Type", "IP", "Refs"]

# CLI column name -> sort key understood by the query engine
_SORTABLE = {
    "wavelength": "wavelength",
    "ion": "ion",
    "type": "transitionType",
    "transitiontype": "transitionType",
    "ip": "ionizationPotential",
    "ionizationpotential": "ionizationPotential",
}

_COMMON_MARK = "●"


def _fmt_opt(x: float | None, decimals: int) -> str:
    if x is None:
        return "—"
    return f"{float(x):.{decimals}f}"


def _parse_columns(spec: str | None) -> list[str]:
    if not spec:
        return list(_DEFAULT_COLUMNS)
    wanted = [c.strip() for c in spec.split(",") if c.strip()]
    by_lower = {k.lower(): k for k in _COLUMNS}
    out: list[str] = []
    for c in wanted:
        key = by_lower.get(c.lower())
        if key is None:
            raise SystemExit(f"Unknown column {c!r}. Choose from: {', '.join(_COLUMNS)}")
        out.append(key)
    return out


def _sort_key(arg: str) -> str:
    return _SORTABLE.get(arg.strip().lower(), arg)


def _format_table_adv(rows: list[dict[str, Any]], columns: list[tuple[str, str, str]]) -> str:
    """
    columns: (key, header, align) where align is 'l' or 'r'
    """
    table = []
    for r in rows:
        table.append([("" if r.get(k) is None else str(r.get(k))) for k, _, _ in columns])

    headers = [h for _, h, _ in columns]

    widths = []
    for j in range(len(columns)):
        col_vals = [headers[j], *[row[j] for row in table]]
        widths.append(max(len(v) for v in col_vals))

    def fmt_row(vals: list[str]) -> str:
        out = []
        for i, v in enumerate(vals):
            out.append(v.rjust(widths[i]) if columns[i][2] == "r" else v.ljust(widths[i]))
        return " | ".join(out)

    sep = "-+-".join("-" * w for w in widths)

    out_lines = [fmt_row(headers), sep]
    out_lines.extend(fmt_row(r) for r in table)
    return "\n".join(out_lines)


def _display_rows(result) -> list[dict[str, Any]]:
    out = []
    for view in result.rows:
        ln = view.line
        wav = format_wavelength(view.display_wavelength) + ("*" if view.converted else "")
        out.append(
            {
                "Wavelength": wav,
                "Ion": (_COMMON_MARK + " " if view.is_common else "") + ln.ion,
                "Ei": _fmt_opt(ln.energy_initial, 3),
                "Ek": _fmt_opt(ln.energy_final, 3),
                "Config": ln.configurations,
                "Terms": ln.terms,
                "J": ln.j_transition,
                "Type": ln.transition_type,
                "IP": _fmt_opt(ln.ionization_potential, 2),
                "Refs": ln.references,
            }
        )
    return out


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--search", "-s", default="", help='Free text, e.g. "[O III]", "Fe", "Ha", "Lyb".')
    p.add_argument("--min-wav", default=None, help="Minimum displayed wavelength (Å, inclusive).")
    p.add_argument("--max-wav", default=None, help="Maximum displayed wavelength (Å, inclusive).")
    p.add_argument("--common-only", action="store_true", help="Only astrophysically common lines.")
    p.add_argument("--sort", default="wavelength", help="wavelength | ion | type | ip (or any record field).")
    p.add_argument("--desc", action="store_true", help="Sort descending.")
    p.add_argument("--air", action="store_true", help="Show air wavelengths (default: vacuum).")


def _spec_from_args(args: argparse.Namespace) -> QuerySpec:
    return QuerySpec(
        search_text=args.search,
        wavelength_min=args.min_wav,
        wavelength_max=args.max_wav,
        common_only=args.common_only,
        sort_key=_sort_key(args.sort),
        sort_direction="desc" if args.desc else "asc",
    )


def main() -> None:
    ap = argparse.ArgumentParser(description="Query the local emission-line table.")
    ap.add_argument("--db-path", type=Path, default=None, help="Override DuckDB path.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable INFO logging.")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ln = sub.add_parser("lines", help="Print matching lines as a table.")
    _add_filter_args(ln)
    ln.add_argument("--limit", type=int, default=None, help="Print at most N rows.")
    ln.add_argument("--columns", default=None, help=f"Comma-separated subset/order of: {','.join(_COLUMNS)}")

    sh = sub.add_parser("show", help="Print one record by id.")
    sh.add_argument("id", type=int)

    ex = sub.add_parser("export", help="Export a machine-friendly JSON bundle.")
    _add_filter_args(ex)
    ex.add_argument("--out", type=Path, default=None)

    args = ap.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    api = open_default_api(db_path=args.db_path)

    if args.cmd == "lines":
        columns = _parse_columns(args.columns)
        result = api.query(_spec_from_args(args), show_vacuum=not args.air)
        rows = _display_rows(result)
        if args.limit is not None:
            rows = rows[: max(0, args.limit)]

        if not rows:
            print("No emission lines match your filters.")
        else:
            scale = "air" if args.air else "vac"
            cols = [(k, _COLUMNS[k][0].replace("λ (Å)", f"λ ({scale}) Å"), _COLUMNS[k][1]) for k in columns]
            print(_format_table_adv(rows, cols))
        print(result.summary())
        return

    if args.cmd == "show":
        line = api.get_line(args.id)
        if line is None:
            raise SystemExit(f"No emission line with id={args.id}")
        print(json.dumps(line_to_record(line), indent=2, ensure_ascii=False))
        return

    if args.cmd == "export":
        bundle = export_query_bundle(api=api, spec=_spec_from_args(args), show_vacuum=not args.air)
        text = json.dumps(bundle, indent=2, ensure_ascii=False)
        if args.out:
            args.out.parent.mkdir(parents=True, exist_ok=True)
            args.out.write_text(text + "\n", encoding="utf-8")
            print(f"Wrote {args.out}")
        else:
            print(text)
        return


if __name__ == "__main__":
    main()
