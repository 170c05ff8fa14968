from __future__ import annotations

import pytest

from emission_lines_db.query.engine import (
    QuerySpec,
    expand_search_term,
    is_common_line,
    parse_bound,
    run_query,
)
from emission_lines_db.scrapers.emission_table.normalize_lines import EmissionLine, normalize_rows, renumber
from emission_lines_db.util.airvac import air_to_vacuum, vacuum_to_air

HEADER = ["λ", "Ion", "Ei", "Ek", "Config", "Terms", "J", "Type", "IP", "Refs", "Note"]


def _line(wav: float, ion: str, **kw) -> EmissionLine:
    return EmissionLine(id=0, wavelength=wav, wavelength_original=str(wav), ion=ion, **kw)


@pytest.fixture()
def lines() -> list[EmissionLine]:
    return renumber(
        [
            _line(1025.72, "Lyβ", ionization_potential=13.6, references="Morton 2003"),
            _line(1215.67, "Lyα", ionization_potential=13.6, references="Morton 2003"),
            _line(972.54, "Lyγ", ionization_potential=13.6),
            _line(1548.19, "C IV", ionization_potential=64.49, configurations="2s-2p"),
            _line(2796.35, "Mg II", ionization_potential=15.04),
            _line(3727.09, "[O II]", ionization_potential=35.12, transition_type="M1"),
            _line(4861.33, "Hβ", ionization_potential=13.6),
            _line(5006.84, "[O III]", ionization_potential=54.94, transition_type="M1"),
            _line(5875.62, "He I", ionization_potential=24.59),
            _line(6562.80, "Hα", ionization_potential=13.6),
            _line(6583.45, "[N II]", transition_type="M1"),
            _line(7135.79, "[Ar III]", ionization_potential=40.74, transition_type="M1"),
            _line(8542.09, "Ca II"),
            _line(10830.3, "Fe XIII", references="see He I blend"),
        ]
    )


def _ions(result) -> list[str]:
    return [v.line.ion for v in result.rows]


def test_expand_search_term() -> None:
    assert expand_search_term("Lyb") == ["lyb", "lyβ"]
    assert expand_search_term("ha") == ["ha", "hα"]
    assert expand_search_term("[O III]") == ["[o iii]"]
    assert "hα" in expand_search_term("Halpha")
    assert "hγ" in expand_search_term("hgamma")


def test_search_alias_lyb_matches_beta_only(lines) -> None:
    res = run_query(lines, QuerySpec(search_text="lyb"))
    assert _ions(res) == ["Lyβ"]


def test_search_alias_ha(lines) -> None:
    res = run_query(lines, QuerySpec(search_text="ha"))
    assert "Hα" in _ions(res)
    assert "Hβ" not in _ions(res)


def test_search_matches_configurations_and_references(lines) -> None:
    assert _ions(run_query(lines, QuerySpec(search_text="2S-2P"))) == ["C IV"]
    assert _ions(run_query(lines, QuerySpec(search_text="morton"))) == ["Lyβ", "Lyα"]


def test_search_literal_bracket_text(lines) -> None:
    assert _ions(run_query(lines, QuerySpec(search_text="[O III]"))) == ["[O III]"]


def test_display_augmentation_end_to_end() -> None:
    rows = [
        HEADER,
        ["1215.67", "Lyα", "", "", "", "", "", "", "13.6", "Morton 1991", ""],
        ["5006.84", "[O III]", "2.5", "0.0", "2p2", "3P-1D", "2-2", "", "35.1", "NIST", ""],
    ]
    data = normalize_rows(rows)

    res = run_query(data, show_vacuum=True)
    lya, oiii = res.rows
    assert lya.display_wavelength == 1215.67
    assert not lya.converted
    assert oiii.display_wavelength == air_to_vacuum(5006.84)
    assert oiii.display_wavelength == pytest.approx(5008.24, abs=0.01)
    assert oiii.converted
    assert lya.is_common and oiii.is_common

    res_air = run_query(data, show_vacuum=False)
    assert res_air.rows[0].display_wavelength == vacuum_to_air(1215.67)
    assert res_air.rows[1].display_wavelength == 5006.84


def test_query_never_mutates_canonical_lines(lines) -> None:
    before = list(lines)
    run_query(lines, QuerySpec(search_text="h", sort_key="ion", sort_direction="desc"), show_vacuum=False)
    assert lines == before


def test_range_filter_inclusive_bounds() -> None:
    data = renumber([_line(4999.999, "A"), _line(5000.0, "B"), _line(5000.001, "C")])
    res = run_query(data, QuerySpec(wavelength_min=5000, wavelength_max=5000), show_vacuum=False)
    assert _ions(res) == ["B"]


def test_range_filter_uses_display_wavelength() -> None:
    data = renumber([_line(6562.80, "Hα")])
    vac = air_to_vacuum(6562.80)
    assert run_query(data, QuerySpec(wavelength_min=6563.5), show_vacuum=True).matched_count == 1
    assert run_query(data, QuerySpec(wavelength_min=6563.5), show_vacuum=False).matched_count == 0
    assert run_query(data, QuerySpec(wavelength_max=vac), show_vacuum=True).matched_count == 1


@pytest.mark.parametrize("bound", ["", "abc", None, float("nan"), "  "])
def test_malformed_bounds_are_ignored(lines, bound) -> None:
    res = run_query(lines, QuerySpec(wavelength_min=bound, wavelength_max=bound))
    assert res.matched_count == len(lines)


def test_text_bounds_parse(lines) -> None:
    res = run_query(lines, QuerySpec(wavelength_min="6000", wavelength_max=" 7000 "), show_vacuum=False)
    assert _ions(res) == ["Hα", "[N II]"]


def test_parse_bound() -> None:
    assert parse_bound("5000") == 5000.0
    assert parse_bound(12) == 12.0
    assert parse_bound("x") is None
    assert parse_bound(float("inf")) is None
    assert parse_bound(True) is None


def test_common_line_classification() -> None:
    assert is_common_line("Hα")
    assert is_common_line("[O III]")
    assert is_common_line("O III")  # bracket-stripped form
    assert is_common_line("He II")
    assert is_common_line("C III]")
    assert not is_common_line("[Ar III]")
    assert not is_common_line("Fe XIII")
    # plain substring rule: "[O I]" is contained in "[O I] blend"
    assert is_common_line("[O I] blend")


def test_common_only_filter(lines) -> None:
    res = run_query(lines, QuerySpec(common_only=True))
    assert "[Ar III]" not in _ions(res)
    assert "Fe XIII" not in _ions(res)
    assert "Lyγ" not in _ions(res)
    assert set(_ions(res)) >= {"Lyα", "Lyβ", "C IV", "Mg II", "[O III]", "He I", "Hα", "Ca II"}


def test_default_sort_is_display_wavelength_ascending(lines) -> None:
    res = run_query(lines, show_vacuum=True)
    wavs = [v.display_wavelength for v in res.rows]
    assert wavs == sorted(wavs)
    assert res.matched_count == res.total_count == len(lines)


def test_sort_descending(lines) -> None:
    res = run_query(lines, QuerySpec(sort_direction="desc"))
    wavs = [v.display_wavelength for v in res.rows]
    assert wavs == sorted(wavs, reverse=True)


def test_sort_by_ion_is_case_insensitive_and_stable() -> None:
    data = renumber(
        [
            _line(1000.0, "b ion"),
            _line(2000.0, "A ion"),
            _line(3000.0, "B ion"),
            _line(4000.0, "a ion"),
        ]
    )
    spec = QuerySpec(sort_key="ion")
    first = run_query(data, spec)
    assert [v.line.wavelength for v in first.rows] == [2000.0, 4000.0, 1000.0, 3000.0]

    second = run_query(data, spec)
    assert [v.line.id for v in second.rows] == [v.line.id for v in first.rows]

    desc = run_query(data, QuerySpec(sort_key="ion", sort_direction="desc"))
    # ties keep canonical order in descending sorts too
    assert [v.line.wavelength for v in desc.rows] == [1000.0, 3000.0, 2000.0, 4000.0]


def test_sort_by_ionization_potential_absent_as_zero(lines) -> None:
    res = run_query(lines, QuerySpec(sort_key="ionizationPotential"))
    ions = _ions(res)
    # absent IP sorts like 0, i.e. first, in canonical order
    assert ions[:3] == ["[N II]", "Ca II", "Fe XIII"]
    assert ions[-1] == "C IV"

    res_desc = run_query(lines, QuerySpec(sort_key="ionization_potential", sort_direction="desc"))
    assert _ions(res_desc)[0] == "C IV"
    assert _ions(res_desc)[-3:] == ["[N II]", "Ca II", "Fe XIII"]


def test_sort_by_transition_type(lines) -> None:
    res = run_query(lines, QuerySpec(sort_key="transitionType"))
    types = [v.line.transition_type for v in res.rows]
    assert types == sorted(types, key=str.lower)


def test_sort_by_energy_puts_absent_last_both_ways() -> None:
    data = renumber(
        [
            _line(1000.0, "none-1"),
            _line(2000.0, "e2", energy_initial=2.0),
            _line(3000.0, "e1", energy_initial=1.0),
            _line(4000.0, "none-2"),
        ]
    )
    asc = run_query(data, QuerySpec(sort_key="energyInitial"))
    assert _ions(asc) == ["e1", "e2", "none-1", "none-2"]
    desc = run_query(data, QuerySpec(sort_key="energyInitial", sort_direction="desc"))
    assert _ions(desc) == ["e2", "e1", "none-1", "none-2"]


@pytest.mark.parametrize("key,direction", [("bogus", "asc"), ("", "desc"), ("wavelength", "sideways"), ("isVacuum", "asc")])
def test_unknown_sort_falls_back_to_wavelength_ascending(lines, key, direction) -> None:
    res = run_query(lines, QuerySpec(sort_key=key, sort_direction=direction))
    wavs = [v.display_wavelength for v in res.rows]
    assert wavs == sorted(wavs)
    assert res.matched_count == len(lines)


def test_direction_is_case_insensitive(lines) -> None:
    res = run_query(lines, QuerySpec(sort_direction="DESC"))
    assert res.rows[0].line.ion == "Fe XIII"


def test_filters_combine_and_counts(lines) -> None:
    res = run_query(lines, QuerySpec(search_text="h", wavelength_min=4000, common_only=True))
    assert _ions(res) == ["Hβ", "He I", "Hα"]
    assert res.matched_count == 3
    assert res.total_count == len(lines)
    assert res.summary() == f"Showing 3 of {len(lines)} lines"


def test_toggle_sort_and_clear() -> None:
    spec = QuerySpec(search_text="Ha", common_only=True)
    s1 = spec.toggle_sort("wavelength")
    assert (s1.sort_key, s1.sort_direction) == ("wavelength", "desc")
    s2 = s1.toggle_sort("wavelength")
    assert (s2.sort_key, s2.sort_direction) == ("wavelength", "asc")
    s3 = s1.toggle_sort("ion")
    assert (s3.sort_key, s3.sort_direction) == ("ion", "asc")

    cleared = s3.cleared()
    assert cleared.search_text == "" and not cleared.common_only
    assert cleared.sort_key == "ion"


def test_empty_dataset() -> None:
    res = run_query([], QuerySpec(search_text="Ha"))
    assert res.rows == []
    assert res.summary() == "Showing 0 of 0 lines"
