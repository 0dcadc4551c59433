"""User-facing enzyme settings with defaults, as read from configuration files."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from sagesearch.enzyme import EnzymeParameters, make_enzyme


def _count(name: str, value: Any, limit: Optional[int] = None) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"`{name}` must be a non-negative integer, got {value!r}")
    if limit is not None and value > limit:
        raise ValueError(f"`{name}` must be at most {limit}, got {value!r}")
    return value


@dataclass
class EnzymeBuilder:
    """Enzyme settings in which every field may be left unset.

    A fresh instance carries trypsin defaults; :meth:`from_dict` leaves every
    key missing from the mapping unset, and :meth:`to_parameters` fills the gaps.
    """

    missed_cleavages: Optional[int] = 0
    min_len: Optional[int] = 5
    max_len: Optional[int] = 50
    cleave_at: Optional[str] = "KR"
    restrict: Optional[str] = "P"
    c_terminal: Optional[bool] = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EnzymeBuilder:
        """Read settings from a mapping; unknown keys are ignored, missing ones unset."""
        if not isinstance(data, Mapping):
            raise ValueError(f"enzyme settings must be a mapping, got {data!r}")
        values = {item.name: data.get(item.name) for item in fields(cls)}

        cleave_at = values["cleave_at"]
        if cleave_at is not None and not isinstance(cleave_at, str):
            raise ValueError(f"`cleave_at` must be a string, got {cleave_at!r}")
        restrict = values["restrict"]
        if restrict is not None and (not isinstance(restrict, str) or len(restrict) != 1):
            raise ValueError(f"`restrict` must be a single character, got {restrict!r}")
        c_terminal = values["c_terminal"]
        if c_terminal is not None and not isinstance(c_terminal, bool):
            raise ValueError(f"`c_terminal` must be a boolean, got {c_terminal!r}")

        return cls(
            missed_cleavages=_count("missed_cleavages", values["missed_cleavages"], 255),
            min_len=_count("min_len", values["min_len"]),
            max_len=_count("max_len", values["max_len"]),
            cleave_at=cleave_at,
            restrict=restrict,
            c_terminal=c_terminal,
        )

    def to_parameters(self) -> EnzymeParameters:
        """Resolve unset fields to their defaults and build digestion parameters."""
        return EnzymeParameters(
            missed_cleavages=1 if self.missed_cleavages is None else self.missed_cleavages,
            min_len=5 if self.min_len is None else self.min_len,
            max_len=50 if self.max_len is None else self.max_len,
            enzyme=make_enzyme(
                "KR" if self.cleave_at is None else self.cleave_at,
                self.restrict,
                True if self.c_terminal is None else self.c_terminal,
            ),
        )