# src/emission_lines_db/scrapers/emission_table/normalize_lines.py
from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from emission_lines_db.util.airvac import is_vacuum_wavelength
from emission_lines_db.util.numeric import clean_text, parse_leading_float

logger = logging.getLogger(__name__)

MIN_FIELDS = 10
DEFAULT_TRANSITION_TYPE = "E1"

# Column positions in an ingested table row.
COL_WAVELENGTH = 0
COL_ION = 1
COL_ENERGY_INITIAL = 2
COL_ENERGY_FINAL = 3
COL_CONFIGURATIONS = 4
COL_TERMS = 5
COL_J_TRANSITION = 6
COL_TRANSITION_TYPE = 7
COL_IONIZATION_POTENTIAL = 8
COL_REFERENCES = 9
COL_NOTE = 10

# Record key (camelCase, as serialized) -> EmissionLine attribute.
RECORD_FIELDS: dict[str, str] = {
    "id": "id",
    "wavelength": "wavelength",
    "wavelengthOriginal": "wavelength_original",
    "ion": "ion",
    "energyInitial": "energy_initial",
    "energyFinal": "energy_final",
    "configurations": "configurations",
    "terms": "terms",
    "jTransition": "j_transition",
    "transitionType": "transition_type",
    "ionizationPotential": "ionization_potential",
    "references": "references",
    "note": "note",
}


@dataclass(frozen=True)
class EmissionLine:
    """
    One canonical emission-line record.

    `is_vacuum` is not stored: it is a function of `wavelength` (< 2000 Å means the
    value is quoted on the vacuum scale, otherwise in air).
    """

    id: int
    wavelength: float
    wavelength_original: str
    ion: str
    energy_initial: float | None = None
    energy_final: float | None = None
    configurations: str = ""
    terms: str = ""
    j_transition: str = ""
    transition_type: str = DEFAULT_TRANSITION_TYPE
    ionization_potential: float | None = None
    references: str = ""
    note: str = ""

    def __post_init__(self) -> None:
        w = self.wavelength
        if isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w) or w <= 0:
            raise ValueError(f"EmissionLine.wavelength must be a finite positive number, got {w!r}")
        for name in ("energy_initial", "energy_final", "ionization_potential"):
            v = getattr(self, name)
            if v is not None and (isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v)):
                raise ValueError(f"EmissionLine.{name} must be a finite number or None, got {v!r}")

    @property
    def is_vacuum(self) -> bool:
        return is_vacuum_wavelength(self.wavelength)


def _field(row: Sequence[Any], idx: int) -> str:
    if idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx])


def _transition_type(raw: str) -> str:
    s = clean_text(raw)
    return s if s else DEFAULT_TRANSITION_TYPE


def parse_row(row: Sequence[Any], provisional_id: int) -> EmissionLine | None:
    """
    Turn one ingested row into an EmissionLine, or None if the row is unusable.

    Unusable means: fewer than 10 fields, or a wavelength that does not parse as a
    finite positive number. Optional numeric fields that do not parse become None.
    """
    if len(row) < MIN_FIELDS:
        return None

    wavelength_text = clean_text(_field(row, COL_WAVELENGTH))
    wavelength = parse_leading_float(wavelength_text)
    if wavelength is None or wavelength <= 0:
        return None

    return EmissionLine(
        id=provisional_id,
        wavelength=wavelength,
        wavelength_original=wavelength_text,
        ion=clean_text(_field(row, COL_ION)),
        energy_initial=parse_leading_float(_field(row, COL_ENERGY_INITIAL)),
        energy_final=parse_leading_float(_field(row, COL_ENERGY_FINAL)),
        configurations=clean_text(_field(row, COL_CONFIGURATIONS)),
        # term symbols keep their sub/superscript markup as-is
        terms=_field(row, COL_TERMS).strip(),
        j_transition=clean_text(_field(row, COL_J_TRANSITION)),
        transition_type=_transition_type(_field(row, COL_TRANSITION_TYPE)),
        ionization_potential=parse_leading_float(_field(row, COL_IONIZATION_POTENTIAL)),
        references=clean_text(_field(row, COL_REFERENCES)),
        note=clean_text(_field(row, COL_NOTE)),
    )


def renumber(lines: Iterable[EmissionLine]) -> list[EmissionLine]:
    """
    Establish canonical order: ascending wavelength (stable for equal values),
    then reassign id = 1..N in that order.
    """
    ordered = sorted(lines, key=lambda ln: ln.wavelength)
    return [replace(ln, id=i) for i, ln in enumerate(ordered, start=1)]


def normalize_rows(rows: Iterable[Sequence[Any]], *, has_header: bool = True) -> list[EmissionLine]:
    """
    Normalize ingested table rows into the canonical, wavelength-sorted list.

    Row 0 is the header when has_header=True and is always skipped. Malformed rows
    (short rows, unparseable wavelength) are dropped silently; they are expected in
    scraped tables and are not errors.
    """
    kept: list[EmissionLine] = []
    dropped = 0

    for pos, row in enumerate(rows):
        if has_header and pos == 0:
            continue
        line = parse_row(row, provisional_id=pos)
        if line is None:
            dropped += 1
            logger.debug("dropping row %d: %r", pos, list(row)[:2])
            continue
        kept.append(line)

    logger.info("normalized %d emission lines (%d rows dropped)", len(kept), dropped)
    return renumber(kept)


def line_to_record(line: EmissionLine) -> dict[str, Any]:
    """JSON-friendly record (camelCase keys). isVacuum is included for consumers."""
    rec: dict[str, Any] = {key: getattr(line, attr) for key, attr in RECORD_FIELDS.items()}
    rec["isVacuum"] = line.is_vacuum
    return rec


def _optional_float(v: Any) -> float | None:
    if v is None:
        return None
    x = float(v)
    # NULL doubles can come back from DataFrame-based readers as NaN
    return None if math.isnan(x) else x


def line_from_record(rec: dict[str, Any]) -> EmissionLine:
    """
    Rebuild an EmissionLine from a record written by line_to_record.

    isVacuum in the record is ignored; it is always recomputed from wavelength.
    Raises ValueError/KeyError for records missing id/wavelength.
    """
    return EmissionLine(
        id=int(rec["id"]),
        wavelength=float(rec["wavelength"]),
        wavelength_original=str(rec.get("wavelengthOriginal") or ""),
        ion=str(rec.get("ion") or ""),
        energy_initial=_optional_float(rec.get("energyInitial")),
        energy_final=_optional_float(rec.get("energyFinal")),
        configurations=str(rec.get("configurations") or ""),
        terms=str(rec.get("terms") or ""),
        j_transition=str(rec.get("jTransition") or ""),
        transition_type=str(rec.get("transitionType") or DEFAULT_TRANSITION_TYPE),
        ionization_potential=_optional_float(rec.get("ionizationPotential")),
        references=str(rec.get("references") or ""),
        note=str(rec.get("note") or ""),
    )


def summarize_lines(lines: Sequence[EmissionLine], *, head: int = 5) -> dict[str, Any]:
    """Quick stats for an ingest run: counts, wavelength span and the first few lines."""
    if not lines:
        return {"n_lines": 0, "n_ions": 0, "wavelength_min": None, "wavelength_max": None, "n_vacuum": 0, "first": []}

    return {
        "n_lines": len(lines),
        "n_ions": len({ln.ion for ln in lines}),
        "wavelength_min": min(ln.wavelength for ln in lines),
        "wavelength_max": max(ln.wavelength for ln in lines),
        "n_vacuum": sum(1 for ln in lines if ln.is_vacuum),
        "first": [(ln.wavelength, ln.ion) for ln in lines[:head]],
    }
