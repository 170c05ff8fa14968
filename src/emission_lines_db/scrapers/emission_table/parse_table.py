from __future__ import annotations

import re
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.element import Tag

from emission_lines_db.scrapers.emission_table.normalize_lines import COL_TERMS

_WS_RE = re.compile(r"\s+")


def _cell_text(cell: Tag) -> str:
    return _WS_RE.sub(" ", cell.get_text()).strip()


def _cell_html(cell: Tag) -> str:
    """Inner HTML of a cell, e.g. '<sup>3</sup>P-<sup>1</sup>D'."""
    return cell.decode_contents().strip()


def parse_table_html(content: bytes | str, *, table_index: int = 0) -> list[list[str]]:
    """
    Scrape one HTML <table> into rows of cell strings.

    Every <tr> becomes one row (header included, at position 0). Cells are the
    whitespace-collapsed text of each <td>/<th>, with entities already decoded,
    except the term-symbol column which keeps its inner HTML so sub/superscripts
    survive for display.

    Returns [] if the document has no table at table_index.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")

    soup = BeautifulSoup(content, "html.parser")
    tables = soup.find_all("table")
    if table_index >= len(tables):
        return []

    rows: list[list[str]] = []
    for tr in tables[table_index].find_all("tr"):
        cells = tr.find_all(["td", "th"], recursive=False)
        if not cells:
            continue
        row = [_cell_html(c) if i == COL_TERMS else _cell_text(c) for i, c in enumerate(cells)]
        rows.append(row)
    return rows


def parse_table_file(path: Path, *, table_index: int = 0) -> list[list[str]]:
    """Read a saved HTML page and scrape its table (see parse_table_html)."""
    if not path.exists():
        raise FileNotFoundError(f"Source table not found: {path}")
    return parse_table_html(path.read_bytes(), table_index=table_index)
