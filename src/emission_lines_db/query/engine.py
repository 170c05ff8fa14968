# src/emission_lines_db/query/engine.py
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from emission_lines_db.scrapers.emission_table.normalize_lines import RECORD_FIELDS, EmissionLine
from emission_lines_db.util.airvac import get_display_wavelength, is_converted
from emission_lines_db.util.numeric import parse_leading_float

logger = logging.getLogger(__name__)

# Astrophysically well-known transitions, highlighted and filterable as "common".
COMMON_LINES: tuple[str, ...] = (
    "Hα",
    "Hβ",
    "Hγ",
    "Hδ",
    "Lyα",
    "Lyβ",
    "[O III]",
    "[O II]",
    "[O I]",
    "[N II]",
    "[N I]",
    "[S II]",
    "[S III]",
    "[Ne III]",
    "[Ne V]",
    "He I",
    "He II",
    "C IV",
    "C III]",
    "C II]",
    "Mg II",
    "Ca II",
    "[Fe VII]",
    "[Fe X]",
    "[Fe XIV]",
)

# Roman-letter suffix -> Greek letter, so "Ha" finds "Hα" and "Lyb" finds "Lyβ".
GREEK_ALIASES: tuple[tuple[str, str], ...] = (
    ("a", "α"),
    ("alpha", "α"),
    ("b", "β"),
    ("beta", "β"),
    ("g", "γ"),
    ("gamma", "γ"),
    ("d", "δ"),
    ("delta", "δ"),
    ("e", "ε"),
    ("epsilon", "ε"),
    ("z", "ζ"),
    ("zeta", "ζ"),
    ("h", "η"),
    ("eta", "η"),
)

DEFAULT_SORT_KEY = "wavelength"
SORT_DIRECTIONS = ("asc", "desc")

_SEARCH_FIELDS = ("ion", "configurations", "references")
_NUMERIC_SORT_ATTRS = frozenset({"id", "energy_initial", "energy_final"})


@dataclass(frozen=True)
class QuerySpec:
    """
    Query parameters for one view of the table.

    Range bounds may be numbers or raw user text; text that does not parse is
    treated as "no bound".
    """

    search_text: str = ""
    wavelength_min: float | str | None = None
    wavelength_max: float | str | None = None
    common_only: bool = False
    sort_key: str = DEFAULT_SORT_KEY
    sort_direction: str = "asc"

    def toggle_sort(self, key: str) -> QuerySpec:
        """Clicking a column: same key flips asc -> desc, anything else starts ascending."""
        if key == self.sort_key and self.sort_direction == "asc":
            return replace(self, sort_direction="desc")
        return replace(self, sort_key=key, sort_direction="asc")

    def cleared(self) -> QuerySpec:
        """Drop all filters, keep the current sort."""
        return QuerySpec(sort_key=self.sort_key, sort_direction=self.sort_direction)


@dataclass(frozen=True)
class LineView:
    """A canonical line plus the values derived for one query (never stored)."""

    line: EmissionLine
    display_wavelength: float
    is_common: bool
    converted: bool


@dataclass(frozen=True)
class QueryResult:
    rows: list[LineView]
    matched_count: int
    total_count: int
    show_vacuum: bool
    spec: QuerySpec = field(default_factory=QuerySpec)

    def summary(self) -> str:
        return f"Showing {self.matched_count} of {self.total_count} lines"


def is_common_line(ion: str) -> bool:
    """
    Substring match against COMMON_LINES, or exact match against an entry with
    its brackets removed ("O III" counts as "[O III]").
    """
    for common in COMMON_LINES:
        if common in ion or ion == common.replace("[", "").replace("]", ""):
            return True
    return False


def expand_search_term(term: str) -> list[str]:
    """
    Lower-case the term and add Greek-letter variants for a trailing alias:

        "lyb"   -> ["lyb", "lyβ"]
        "halpha" -> ["halpha", "halphα", "hα"]
    """
    lower = term.lower()
    variants = [lower]
    for roman, greek in GREEK_ALIASES:
        if lower.endswith(roman):
            variants.append(lower[: -len(roman)] + greek)
    return list(dict.fromkeys(variants))


def parse_bound(value: object) -> float | None:
    """Range bound from user input; empty/unparseable/non-finite -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        x = float(value)
        return x if math.isfinite(x) else None
    s = str(value).strip()
    if not s:
        return None
    return parse_leading_float(s)


def _matches_search(view: LineView, variants: Sequence[str]) -> bool:
    haystacks = [str(getattr(view.line, f) or "").lower() for f in _SEARCH_FIELDS]
    return any(v in h for v in variants for h in haystacks)


def _resolve_sort_attr(key: str) -> str | None:
    """Map a sort key (camelCase record key or snake_case attribute) to an EmissionLine attribute."""
    if key in RECORD_FIELDS:
        return RECORD_FIELDS[key]
    if key in RECORD_FIELDS.values():
        return key
    return None


def _normalize_sort(spec: QuerySpec) -> tuple[str, bool]:
    """Return (attribute, descending); unknown keys/directions fall back to wavelength ascending."""
    attr = _resolve_sort_attr(spec.sort_key or "")
    direction = (spec.sort_direction or "").strip().lower()

    if attr is None or direction not in SORT_DIRECTIONS:
        logger.warning(
            "unsupported sort %r/%r; using %s ascending",
            spec.sort_key,
            spec.sort_direction,
            DEFAULT_SORT_KEY,
        )
        return DEFAULT_SORT_KEY, False
    return attr, direction == "desc"


def _sort_views(views: list[LineView], attr: str, descending: bool) -> list[LineView]:
    """
    Stable sort. Ties keep their incoming (canonical) order in both directions.

    - wavelength: the displayed (unit-adjusted) value
    - ionization_potential: absent counts as 0
    - id / energies: numeric, absent values after all present ones
    - everything else: case-insensitive text
    """
    if attr in _NUMERIC_SORT_ATTRS:
        present = [v for v in views if getattr(v.line, attr) is not None]
        absent = [v for v in views if getattr(v.line, attr) is None]
        return sorted(present, key=lambda v: getattr(v.line, attr), reverse=descending) + absent

    # sorted(reverse=True) keeps equal elements in their original order
    return sorted(views, key=_sort_key_for(attr), reverse=descending)


def _sort_key_for(attr: str) -> Callable[[LineView], Any]:
    if attr == "wavelength":
        return lambda v: v.display_wavelength
    if attr == "ionization_potential":
        return lambda v: v.line.ionization_potential or 0.0
    return lambda v: str(getattr(v.line, attr) or "").lower()


def augment(lines: Sequence[EmissionLine], show_vacuum: bool) -> list[LineView]:
    """Attach the display wavelength, common-line tag and conversion flag to every line."""
    return [
        LineView(
            line=ln,
            display_wavelength=get_display_wavelength(ln, show_vacuum),
            is_common=is_common_line(ln.ion),
            converted=is_converted(ln, show_vacuum),
        )
        for ln in lines
    ]


def run_query(lines: Sequence[EmissionLine], spec: QuerySpec | None = None, *, show_vacuum: bool = True) -> QueryResult:
    """
    Filter and sort the canonical lines into a display view.

    Stages: augment -> text search -> wavelength range -> common-only -> sort.
    The input lines are never modified.
    """
    spec = spec or QuerySpec()
    show_vacuum = bool(show_vacuum)

    views = augment(lines, show_vacuum)

    if spec.search_text:
        variants = expand_search_term(spec.search_text)
        views = [v for v in views if _matches_search(v, variants)]

    wmin = parse_bound(spec.wavelength_min)
    if wmin is not None:
        views = [v for v in views if v.display_wavelength >= wmin]

    wmax = parse_bound(spec.wavelength_max)
    if wmax is not None:
        views = [v for v in views if v.display_wavelength <= wmax]

    if spec.common_only:
        views = [v for v in views if v.is_common]

    attr, descending = _normalize_sort(spec)
    views = _sort_views(views, attr, descending)

    return QueryResult(
        rows=views,
        matched_count=len(views),
        total_count=len(lines),
        show_vacuum=show_vacuum,
        spec=spec,
    )
