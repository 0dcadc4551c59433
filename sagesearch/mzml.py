"""Streaming reader for mzML mass spectrometry files."""

from __future__ import annotations

import base64
import binascii
import enum
import io
import logging
import math
import struct
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass
from typing import IO, Optional, Union

from sagesearch.spectra import MzMLError, Precursor, RawSpectrum, Representation

log = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 16

# Binary array encoding: exactly one of each group is expected.
ZLIB_COMPRESSION = "MS:1000574"
NO_COMPRESSION = "MS:1000576"

INTENSITY_ARRAY = "MS:1000515"
MZ_ARRAY = "MS:1000514"
NOISE_ARRAY = "MS:1002744"

FLOAT_64 = "MS:1000523"
FLOAT_32 = "MS:1000521"

MS_LEVEL = "MS:1000511"
PROFILE = "MS:1000128"
CENTROID = "MS:1000127"
TOTAL_ION_CURRENT = "MS:1000285"

SCAN_START_TIME = "MS:1000016"
UNIT_SECONDS = "UO:0000010"
UNIT_MINUTES = "UO:0000031"
ION_INJECTION_TIME = "MS:1000927"

SELECTED_ION_MZ = "MS:1000744"
SELECTED_ION_INT = "MS:1000042"
SELECTED_ION_CHARGE = "MS:1000041"

ISO_WINDOW_LOWER = "MS:1000828"
ISO_WINDOW_UPPER = "MS:1000829"


class _State(enum.Enum):
    SPECTRUM = enum.auto()
    SCAN = enum.auto()
    BINARY_DATA_ARRAY = enum.auto()
    BINARY = enum.auto()
    PRECURSOR = enum.auto()
    SELECTED_ION = enum.auto()


class _BinaryKind(enum.Enum):
    INTENSITY = enum.auto()
    MZ = enum.auto()
    NOISE = enum.auto()


class _Dtype(enum.Enum):
    F32 = enum.auto()
    F64 = enum.auto()


_ENTER = {
    ("scan", _State.SPECTRUM): _State.SCAN,
    ("binaryDataArray", _State.SPECTRUM): _State.BINARY_DATA_ARRAY,
    ("binary", _State.BINARY_DATA_ARRAY): _State.BINARY,
    ("precursor", _State.SPECTRUM): _State.PRECURSOR,
    ("selectedIon", _State.PRECURSOR): _State.SELECTED_ION,
}

_LEAVE = {
    (_State.BINARY, "binary"): _State.BINARY_DATA_ARRAY,
    (_State.BINARY_DATA_ARRAY, "binaryDataArray"): _State.SPECTRUM,
    (_State.SELECTED_ION, "selectedIon"): _State.PRECURSOR,
    (_State.SCAN, "scan"): _State.SPECTRUM,
}

_BINARY_KINDS = {
    INTENSITY_ARRAY: _BinaryKind.INTENSITY,
    MZ_ARRAY: _BinaryKind.MZ,
    NOISE_ARRAY: _BinaryKind.NOISE,
}


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _attribute(elem: ET.Element, name: str) -> str:
    value = elem.get(name)
    if value is None:
        raise MzMLError()
    return value


def _float_value(elem: ET.Element) -> float:
    text = _attribute(elem, "value")
    try:
        return float(text)
    except ValueError as err:
        raise MzMLError(f"error parsing float: {text!r}") from err


def _int_value(elem: ET.Element) -> int:
    text = _attribute(elem, "value")
    try:
        value = int(text)
    except ValueError as err:
        raise MzMLError(f"error parsing int: {text!r}") from err
    if not 0 <= value <= 255:
        raise MzMLError(f"error parsing int: {text!r}")
    return value


def _divide(value: float, noise: float) -> float:
    if noise == 0.0:
        return math.copysign(math.inf, value) if value else math.nan
    return value / noise


def _decode(text: str, compressed: bool, dtype: _Dtype) -> list[float]:
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as err:
        raise MzMLError(f"error decoding base64: {err}") from err
    if compressed:
        try:
            raw = zlib.decompress(raw)
        except zlib.error as err:
            raise MzMLError(f"io error: {err}") from err
    if dtype is _Dtype.F32:
        count = len(raw) // 4
        return list(struct.unpack_from(f"<{count}f", raw))
    if len(raw) % 8:
        raise MzMLError()
    return list(struct.unpack(f"<{len(raw) // 8}d", raw))


class _Session:
    """Mutable state for one pass over an mzML document."""

    def __init__(self, reader: MzMLReader) -> None:
        self.reader = reader
        self.state: Optional[_State] = None
        self.compressed = False
        self.dtype = _Dtype.F64
        self.binary_kind: Optional[_BinaryKind] = None
        self.spectrum = self._fresh_spectrum()
        self.precursor = Precursor()
        self.iso_lo: Optional[float] = None
        self.iso_hi: Optional[float] = None
        self.noise: list[float] = []
        self.spectra: list[RawSpectrum] = []

    def _fresh_spectrum(self) -> RawSpectrum:
        return RawSpectrum(file_id=self.reader.file_id)

    def _abandon_spectrum(self) -> None:
        self.spectrum = self._fresh_spectrum()
        self.state = None

    def start(self, elem: ET.Element) -> None:
        name = _local_name(elem.tag)
        if name == "spectrum":
            self.state = _State.SPECTRUM
        else:
            self.state = _ENTER.get((name, self.state), self.state)

        if name == "spectrum":
            self.spectrum.id = _attribute(elem, "id")
        elif name == "precursor":
            reference = elem.get("spectrumRef")
            if reference is not None:
                self.precursor.spectrum_ref = reference
        elif name == "cvParam":
            self._cv_param(elem)

    def _cv_param(self, elem: ET.Element) -> None:
        state = self.state
        if state is _State.BINARY_DATA_ARRAY:
            accession = _attribute(elem, "accession")
            if accession == ZLIB_COMPRESSION:
                self.compressed = True
            elif accession == NO_COMPRESSION:
                self.compressed = False
            elif accession == FLOAT_64:
                self.dtype = _Dtype.F64
            elif accession == FLOAT_32:
                self.dtype = _Dtype.F32
            else:
                # Unknown controlled vocabulary terms disable the array.
                self.binary_kind = _BINARY_KINDS.get(accession)
        elif state is _State.SPECTRUM:
            accession = _attribute(elem, "accession")
            if accession == MS_LEVEL:
                level = _int_value(elem)
                wanted = self.reader.ms_level
                if wanted is not None and level != wanted:
                    self._abandon_spectrum()
                self.spectrum.ms_level = level
            elif accession == PROFILE:
                self.spectrum.representation = Representation.PROFILE
            elif accession == CENTROID:
                self.spectrum.representation = Representation.CENTROID
            elif accession == TOTAL_ION_CURRENT:
                value = _float_value(elem)
                if value == 0.0:
                    self._abandon_spectrum()
                else:
                    self.spectrum.total_ion_current = value
        elif state is _State.PRECURSOR:
            accession = _attribute(elem, "accession")
            if accession == ISO_WINDOW_LOWER:
                self.iso_lo = _float_value(elem)
            elif accession == ISO_WINDOW_UPPER:
                self.iso_hi = _float_value(elem)
        elif state is _State.SELECTED_ION:
            accession = _attribute(elem, "accession")
            if accession == SELECTED_ION_CHARGE:
                self.precursor.charge = _int_value(elem)
            elif accession == SELECTED_ION_MZ:
                self.precursor.mz = _float_value(elem)
            elif accession == SELECTED_ION_INT:
                self.precursor.intensity = _float_value(elem)
        elif state is _State.SCAN:
            accession = _attribute(elem, "accession")
            if accession == SCAN_START_TIME:
                value = _float_value(elem)
                unit = _attribute(elem, "unitAccession")
                if unit == UNIT_SECONDS:
                    self.spectrum.scan_start_time = value / 60.0
                elif unit == UNIT_MINUTES:
                    self.spectrum.scan_start_time = value
                else:
                    raise MzMLError()
            elif accession == ION_INJECTION_TIME:
                self.spectrum.ion_injection_time = _float_value(elem)

    def _binary_text(self, text: Optional[str]) -> None:
        wanted = self.reader.ms_level
        if wanted is not None and self.spectrum.ms_level != wanted:
            return
        raw = "".join((text or "").split())
        if not raw or self.binary_kind is None:
            return
        values = _decode(raw, self.compressed, self.dtype)
        if self.binary_kind is _BinaryKind.INTENSITY:
            self.spectrum.intensity = values
        elif self.binary_kind is _BinaryKind.MZ:
            self.spectrum.mz = values
        else:
            self.noise = values
        self.binary_kind = None

    def end(self, elem: ET.Element) -> None:
        name = _local_name(elem.tag)
        state = self.state

        if state is _State.BINARY and name == "binary":
            self._binary_text(elem.text)

        if state is _State.PRECURSOR and name == "precursor":
            if self.precursor.mz != 0.0:
                if self.iso_lo is not None and self.iso_hi is not None:
                    self.precursor.isolation_window = (-self.iso_lo, self.iso_hi)
                else:
                    self.precursor.isolation_window = None
                self.spectrum.precursors.append(self.precursor)
                self.precursor = Precursor()
            self.state = _State.SPECTRUM
        elif name == "spectrum":
            self._finish_spectrum()
            elem.clear()
            self.state = None
        else:
            self.state = _LEAVE.get((state, name), state)

    def _finish_spectrum(self) -> None:
        spectrum = self.spectrum
        wanted = self.reader.ms_level
        allow = wanted is None or wanted == spectrum.ms_level
        if allow:
            level = self.reader.signal_to_noise
            if level is not None and level == spectrum.ms_level and self.noise:
                divided = [_divide(value, noise) for value, noise in zip(spectrum.intensity, self.noise)]
                spectrum.intensity = divided + spectrum.intensity[len(divided):]
                self.noise = []
            self.spectra.append(spectrum)
        self.spectrum = self._fresh_spectrum()


@dataclass
class MzMLReader:
    """Reads spectra from mzML documents.

    ``ms_level`` keeps only spectra of that MS level. When ``signal_to_noise``
    names a level and the file carries noise arrays, intensities at that level
    are divided by the noise.
    """

    file_id: int = 0
    ms_level: Optional[int] = None
    signal_to_noise: Optional[int] = None

    def parse(self, stream: Union[IO[bytes], IO[str], bytes, str]) -> list[RawSpectrum]:
        """Parse every spectrum in ``stream``.

        XML syntax errors are logged and end the parse, returning the spectra
        read so far; malformed mzML content raises :class:`MzMLError`.
        """
        if isinstance(stream, (bytes, bytearray)):
            stream = io.BytesIO(bytes(stream))
        elif isinstance(stream, str):
            stream = io.StringIO(stream)

        session = _Session(self)
        parser = ET.XMLPullParser(events=("start", "end"))

        def drain() -> None:
            for event, elem in parser.read_events():
                if event == "start":
                    session.start(elem)
                else:
                    session.end(elem)

        try:
            while True:
                chunk = stream.read(_CHUNK_SIZE)
                if not chunk:
                    break
                parser.feed(chunk)
                drain()
            parser.close()
            drain()
        except ET.ParseError as err:
            drain()
            log.error("unhandled XML error while parsing mzML: %s", err)
        return session.spectra