"""Convenience readers for spectra, protein databases and JSON from cloud paths."""

from __future__ import annotations

import json
from typing import Any, BinaryIO, Optional

from sagesearch.cloudpath import CloudPath, CloudPathError, read_and_execute
from sagesearch.fasta import Fasta
from sagesearch.mzml import MzMLReader
from sagesearch.spectra import RawSpectrum


def _read_text(stream: BinaryIO) -> str:
    try:
        return stream.read().decode("utf-8")
    except UnicodeDecodeError as err:
        raise CloudPathError(f"stream did not contain valid UTF-8: {err}") from err


def read_mzml(
    path: str | CloudPath, file_id: int = 0, signal_to_noise: Optional[int] = None
) -> list[RawSpectrum]:
    """Read all spectra from an mzML file, tagging them with ``file_id``."""
    reader = MzMLReader(file_id=file_id, signal_to_noise=signal_to_noise)
    return read_and_execute(path, reader.parse)


def read_fasta(path: str | CloudPath, decoy_tag: str = "rev_", generate_decoys: bool = True) -> Fasta:
    """Read and parse a FASTA protein database."""
    contents = read_and_execute(path, _read_text)
    return Fasta.parse(contents, decoy_tag, generate_decoys)


def read_json(path: str | CloudPath) -> Any:
    """Read and decode a JSON document."""
    contents = read_and_execute(path, _read_text)
    try:
        return json.loads(contents)
    except json.JSONDecodeError as err:
        raise CloudPathError(f"invalid JSON in {path}: {err}") from err