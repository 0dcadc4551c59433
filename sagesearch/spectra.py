"""Raw spectra as read from mzML files, and the errors raised while reading them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

from sagesearch.cloudpath import CloudPathError


class MzMLError(CloudPathError):
    """Raised when an mzML document cannot be parsed."""

    def __init__(self, message: str = "malformed MzML") -> None:
        super().__init__(message)


class Representation(enum.Enum):
    """Whether peaks in a spectrum are profile data or centroided."""

    PROFILE = "profile"
    CENTROID = "centroid"


@dataclass
class Precursor:
    """A selected precursor ion of a tandem spectrum.

    ``isolation_window`` holds the ``(lower, upper)`` offsets in Da around the
    precursor m/z, with the lower offset negative, when the file gives both.
    """

    mz: float = 0.0
    intensity: Optional[float] = None
    charge: Optional[int] = None
    spectrum_ref: Optional[str] = None
    isolation_window: Optional[tuple[float, float]] = None


@dataclass
class RawSpectrum:
    """An unprocessed spectrum: its metadata, precursors and peak arrays.

    ``scan_start_time`` is in minutes.
    """

    file_id: int = 0
    ms_level: int = 0
    id: str = ""
    precursors: list[Precursor] = field(default_factory=list)
    representation: Representation = Representation.PROFILE
    scan_start_time: float = 0.0
    ion_injection_time: float = 0.0
    total_ion_current: float = 0.0
    mz: list[float] = field(default_factory=list)
    intensity: list[float] = field(default_factory=list)