from __future__ import annotations

import html as _html
import math
import re

_WS_RE = re.compile(r"\s+")
_SUP_OPEN_RE = re.compile(r"<\s*sup\s*>", flags=re.IGNORECASE)
_SUPSUB_TAG_RE = re.compile(r"</?\s*su[pb]\s*>", flags=re.IGNORECASE)
_LEADING_FLOAT_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_POW10_RE = re.compile(r"^\s*[x×*·]\s*10\s*(?:\^|\*\*)?\s*([-+]?\d+)")

_SUPERSCRIPT_DIGITS = str.maketrans("⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺", "0123456789-+")
_SUPERSCRIPT_RUN_RE = re.compile("[⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺]+")
_DASHES = {"\u2212": "-", "\u2013": "-", "\u2012": "-"}


def clean_text(value: object) -> str:
    """Unescape HTML entities and collapse runs of whitespace (incl. nbsp) to single spaces."""
    if value is None:
        return ""
    s = _html.unescape(str(value)).replace("\u00a0", " ")
    return _WS_RE.sub(" ", s).strip()


def _normalize_numeric_text(s: str) -> str:
    s = _SUP_OPEN_RE.sub("^", clean_text(s))
    s = _SUPSUB_TAG_RE.sub("", s)
    s = _SUPERSCRIPT_RUN_RE.sub(lambda m: "^" + m.group(0).translate(_SUPERSCRIPT_DIGITS), s)
    for dash, ascii_dash in _DASHES.items():
        s = s.replace(dash, ascii_dash)
    return s.strip()


def parse_leading_float(value: object) -> float | None:
    """
    Parse the leading number of a table cell, the way a browser's parseFloat does,
    with support for the scientific notation found in HTML tables:

        "1215.67"            -> 1215.67
        "6562.80*"           -> 6562.8   (trailing flags ignored)
        "2.5&times;10<sup>&minus;3</sup>" -> 0.0025
        "3.1×10⁴"            -> 31000.0
        "", "—", "n/a"       -> None

    Returns None for anything that does not start with a number or is not finite.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        x = float(value)
        return x if math.isfinite(x) else None

    s = _normalize_numeric_text(str(value))
    m = _LEADING_FLOAT_RE.match(s)
    if not m:
        return None

    x = float(m.group(0))
    pm = _POW10_RE.match(s[m.end() :])
    if pm:
        x = x * float(f"1e{int(pm.group(1))}")

    return x if math.isfinite(x) else None
