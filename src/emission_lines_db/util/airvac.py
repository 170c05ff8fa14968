from __future__ import annotations

import math
from typing import Any

# Source tables quote vacuum wavelengths below this value and air wavelengths above it.
VACUUM_THRESHOLD_A = 2000.0

# Number of fixed-point steps for the air -> vacuum inverse. Always run in full,
# so results are bit-reproducible.
AIR_TO_VACUUM_ITERATIONS = 10


def _check_wavelength(value: Any, name: str) -> float:
    """Return value as a float, or raise ValueError if it is not a finite positive number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    x = float(value)
    if not math.isfinite(x) or x <= 0.0:
        raise ValueError(f"{name} must be a finite positive wavelength in Angstrom, got {value!r}")
    return x


def refractive_index(lambda_vac: float) -> float:
    """Refractive index of standard air at vacuum wavelength lambda_vac (Angstrom)."""
    return 1.0 + 2.735182e-4 + 131.4182 / (lambda_vac**2) + 2.76249e8 / (lambda_vac**4)


def _index_at(lambda_vac: float) -> float:
    try:
        n = refractive_index(lambda_vac)
    except (ZeroDivisionError, OverflowError) as e:
        raise ValueError(f"refractive index undefined at {lambda_vac!r} Å") from e
    if not math.isfinite(n):
        raise ValueError(f"refractive index undefined at {lambda_vac!r} Å")
    return n


def is_vacuum_wavelength(wavelength: float) -> bool:
    """True if a tabulated wavelength is quoted on the vacuum scale (< 2000 Å)."""
    return wavelength < VACUUM_THRESHOLD_A


def vacuum_to_air(lambda_vac: float) -> float:
    """
    Convert a vacuum wavelength to air (both in Angstrom).

        λ_air = λ_vac / n(λ_vac)

    Raises ValueError for non-positive or non-finite input.
    """
    lam = _check_wavelength(lambda_vac, "lambda_vac")
    out = lam / _index_at(lam)
    if not math.isfinite(out):
        raise ValueError(f"vacuum_to_air({lambda_vac!r}) did not produce a finite wavelength")
    return out


def air_to_vacuum(lambda_air: float) -> float:
    """
    Convert an air wavelength to vacuum (both in Angstrom).

    n depends on the unknown vacuum wavelength, so this runs the fixed-point
    iteration λ_vac <- λ_air * n(λ_vac), starting from λ_vac = λ_air, for exactly
    AIR_TO_VACUUM_ITERATIONS steps. Over 700-50000 Å the update contracts by
    a factor below 1e-2 per step, so ten steps reach double precision.

    Raises ValueError for non-positive or non-finite input.
    """
    lam_air = _check_wavelength(lambda_air, "lambda_air")

    lam_vac = lam_air
    for _ in range(AIR_TO_VACUUM_ITERATIONS):
        lam_vac = lam_air * _index_at(lam_vac)

    if not math.isfinite(lam_vac):
        raise ValueError(f"air_to_vacuum({lambda_air!r}) did not produce a finite wavelength")
    return lam_vac


def get_display_wavelength(line: Any, show_vacuum: bool) -> float:
    """
    Wavelength of `line` on the requested scale.

    `line` is anything with `wavelength` and `is_vacuum` attributes (EmissionLine).
    A line already on the requested scale is returned untouched, so values never
    drift through a needless round-trip.
    """
    wavelength = line.wavelength
    if line.is_vacuum == bool(show_vacuum):
        return wavelength
    if show_vacuum:
        return air_to_vacuum(wavelength)
    return vacuum_to_air(wavelength)


def is_converted(line: Any, show_vacuum: bool) -> bool:
    """True if get_display_wavelength(line, show_vacuum) applies a conversion."""
    return line.is_vacuum != bool(show_vacuum)


def format_wavelength(wavelength: float, decimals: int = 3) -> str:
    """Fixed-decimal display string, e.g. 5008.240."""
    return f"{float(wavelength):.{decimals}f}"
