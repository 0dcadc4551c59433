# sagesearch

Building blocks for database searching in bottom-up proteomics:

- **Enzymatic digestion** of protein sequences (trypsin-like, Asp-N-like,
  chymotrypsin-like, non-specific and "no cleavage" digests), with missed
  cleavages and length limits — `sagesearch.enzyme`, configured through
  `sagesearch.builder`.
- **FASTA parsing** with decoy handling, either keeping decoys found in the
  database or dropping them so they can be generated elsewhere —
  `sagesearch.fasta`.
- **mzML reading**: spectra, precursors, isolation windows, scan times
  (converted to minutes), base64 / zlib encoded 32- and 64-bit binary arrays,
  optional MS level filtering and signal-to-noise scaling —
  `sagesearch.mzml`, with the data classes in `sagesearch.spectra`.
- **Paths** that may be local files or `s3://bucket/key` locations, with
  transparent gzip handling for names ending in `gz` or `gzip` —
  `sagesearch.cloudpath`, and one-call readers in `sagesearch.util`.
- Small numerical helpers: peptide isotope envelopes
  (`sagesearch.isotopes`), in-place top-k selection (`sagesearch.heap`) and
  widest-range binary search over sorted data (`sagesearch.search`).

The package has no runtime dependencies beyond the Python standard library
and supports Python 3.10 and later.

## Installation

```
pip install sagesearch
```

To run the test suite:

```
pip install "sagesearch[test]"
pytest
```

## Usage

### Digesting a protein

```python
from sagesearch.builder import EnzymeBuilder

params = EnzymeBuilder.from_dict({"cleave_at": "KR", "restrict": "P"}).to_parameters()
for digest in params.digest("MADEEKLPPGWEKRMSRSSGRVYYFNHITNASQWERPSGN", "sp|P12345"):
    print(digest.sequence, digest.position, digest.missed_cleavages)
```

`EnzymeBuilder.from_dict` leaves every key missing from the mapping unset,
and `to_parameters()` fills unset fields with: one missed cleavage, peptide
lengths 5 to 50, cleavage at `KR`, no restriction residue and C-terminal
cleavage. A fresh `EnzymeBuilder()` instead carries trypsin settings: no
missed cleavages and cleavage blocked before `P`. Invalid values raise
`ValueError`.

`make_enzyme(cleave, skip_suffix, c_terminal)` builds an `Enzyme` directly.
An empty `cleave` gives `None`, which `EnzymeParameters` treats as a
non-specific digest (every window of allowed length); `"$"` leaves the
sequence uncut. Characters that are not amino acids raise `ValueError`.

Each `Digest` records its sequence, protein, missed cleavages, decoy flag and
`Position` (`NTERM`, `CTERM`, `FULL` or `INTERNAL`). Digests compare equal
when sequence and position match. `Digest.reverse()` builds the decoy form,
reversing the sequence while keeping the first and last residues in place.

### Reading a FASTA database

```python
from sagesearch.util import read_fasta

fasta = read_fasta("proteins.fasta.gz", "rev_", True)
digests = fasta.digest(params)
```

`Fasta.parse(contents, decoy_tag, generate_decoys)` does the same for text
already in memory; the accession is the first word of each header. When
`generate_decoys` is true, entries whose accession contains the decoy tag are
dropped; otherwise they are kept and their digests are marked as decoys.

### Reading spectra

```python
from sagesearch.util import read_mzml

spectra = read_mzml("run01.mzML", 0, None)
for spectrum in spectra:
    print(spectrum.id, spectrum.ms_level, spectrum.scan_start_time, len(spectrum.mz))
```

`MzMLReader(file_id, ms_level, signal_to_noise).parse(stream)` reads from an
open binary or text stream, or from `bytes` or `str`, and returns a list of
`RawSpectrum`. Spectra whose total ion current is zero are skipped. Malformed
mzML content (a missing required attribute, an unknown scan time unit, bad
numbers, base64 or zlib data) raises `MzMLError`; an XML syntax error is
logged and the spectra read up to that point are returned.

### Paths

```python
from sagesearch.cloudpath import parse_cloud_path

out = parse_cloud_path("results")
out.mkdir()
out.push("results.json")
out.write_bytes(b"{}")
```

`parse_cloud_path` returns a `LocalPath` or an `S3Path`; any URI scheme
other than `s3`, or an `s3://` URI without a bucket, raises
`InvalidUriError`, a subclass of `CloudPathError`. Both path types offer
`push`, `filename`, `mkdir` (a no-op for S3), `read` and `write_bytes`.

S3 access is signed with credentials from the environment
(`AWS_ACCESS_KEY_ID`, `AWS_SECRET_ACCESS_KEY`, optional `AWS_SESSION_TOKEN`),
the region from `AWS_REGION` or `AWS_DEFAULT_REGION` (default `us-east-1`),
and an optional endpoint from `AWS_ENDPOINT_URL_S3` or `AWS_ENDPOINT_URL`.
Writes always go through a multipart upload in 256 MB parts.

`read_and_execute(path, func)` opens a path (decompressing when needed) and
returns `func` applied to the stream; reading an S3 bucket without a key
raises `InvalidUriError`. `read_json(path)` loads a JSON document the same
way.

### Helpers

```python
from sagesearch.heap import bounded_min_heapify, check_heap
from sagesearch.isotopes import peptide_isotopes
from sagesearch.search import binary_search_slice

peptide_isotopes(60, 5)          # relative M, M+1, M+2 abundances, largest = 1.0

data = [1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0]
binary_search_slice(data, None, 1.75, 3.5)
# (1, 6): data[1:6] covers every value between 1.75 and 3.5

items = list(range(10))
bounded_min_heapify(items, 3)    # the 3 largest now sit in items[:3]
check_heap(items[:3])            # True
```

`binary_search_slice(items, key, low, high)` takes a one-argument key
function, or `None` for the items themselves.

## What it does not do

This package provides pieces of a peptide search, not the search itself. It
has no command-line program, does not build a fragment index or compute
peptide and fragment masses, does not apply modifications, score spectra,
estimate false discovery rates or quantify, and writes no result tables.