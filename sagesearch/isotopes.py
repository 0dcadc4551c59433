"""Approximate isotope envelopes for peptides from carbon and sulfur counts."""

from __future__ import annotations

import math


def _convolve(a: list[float], b: list[float]) -> list[float]:
    return [sum(a[i] * b[n - i] for i in range(n + 1)) for n in range(4)]


def _poisson(lam: float) -> list[float]:
    return [lam**k * math.exp(-lam) / math.factorial(k) for k in range(4)]


def _carbon_isotopes(count: int) -> list[float]:
    return _poisson(count * 0.011)


def _sulfur_isotopes(count: int) -> list[float]:
    lambda33 = count * 0.0076
    lambda35 = count * 0.044
    s35 = [math.exp(-lambda35), 0.0, lambda35 * math.exp(-lambda35), 0.0]
    return _convolve(_poisson(lambda33), s35)


def peptide_isotopes(carbons: int, sulfurs: int) -> tuple[float, float, float]:
    """Relative abundance of the first three isotope peaks, scaled so the largest is 1."""
    envelope = _convolve(_carbon_isotopes(carbons), _sulfur_isotopes(sulfurs))
    peak = max(envelope[:3])
    return (envelope[0] / peak, envelope[1] / peak, envelope[2] / peak)