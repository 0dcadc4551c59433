import base64
import gzip
import json
import struct

import pytest

from sagesearch.cloudpath import CloudPathError, InvalidUriError
from sagesearch.util import read_fasta, read_json, read_mzml

FASTA = """
>sp|AAAAA some protein
MEWKLEQSMREQALLKAQLTQLK
>rev_sp|BBBBB
KLQTLQAKLLAQERMSQELKWEM
"""


def mzml_document(spec_id, mz, intensity, noise=None):
    def array(kind, values):
        data = base64.b64encode(struct.pack(f"<{len(values)}d", *values)).decode()
        return (
            f'<binaryDataArray><cvParam accession="{kind}"/>'
            '<cvParam accession="MS:1000523"/><cvParam accession="MS:1000576"/>'
            f"<binary>{data}</binary></binaryDataArray>"
        )

    arrays = array("MS:1000514", mz) + array("MS:1000515", intensity)
    if noise is not None:
        arrays += array("MS:1002744", noise)
    return (
        '<mzML><run><spectrumList>'
        f'<spectrum id="{spec_id}"><cvParam accession="MS:1000511" value="2"/>'
        f"<binaryDataArrayList>{arrays}</binaryDataArrayList></spectrum>"
        "</spectrumList></run></mzML>"
    ).encode()


def test_read_fasta_drops_decoys_when_generating(tmp_path):
    path = tmp_path / "db.fasta"
    path.write_text(FASTA)
    fasta = read_fasta(str(path), "rev_", True)
    assert fasta.targets == [("sp|AAAAA", "MEWKLEQSMREQALLKAQLTQLK")]


def test_read_fasta_keeps_decoys(tmp_path):
    path = tmp_path / "db.fasta"
    path.write_text(FASTA)
    fasta = read_fasta(str(path), "rev_", False)
    assert [accession for accession, _ in fasta.targets] == ["sp|AAAAA", "rev_sp|BBBBB"]


def test_read_fasta_gzip_matches_plain(tmp_path):
    plain = tmp_path / "db.fasta"
    plain.write_text(FASTA)
    packed = tmp_path / "db.fasta.gz"
    packed.write_bytes(gzip.compress(FASTA.encode()))
    assert read_fasta(str(packed), "rev_", True).targets == read_fasta(str(plain), "rev_", True).targets


def test_read_fasta_invalid_utf8(tmp_path):
    path = tmp_path / "bad.fasta"
    path.write_bytes(b">sp|X\n\xff\xfe\n")
    with pytest.raises(CloudPathError):
        read_fasta(str(path), "rev_", True)


def test_read_json_round_trip(tmp_path):
    data = {"database": {"fasta": "db.fasta", "bucket_size": 8192}, "mzml_paths": ["a.mzML"]}
    path = tmp_path / "params.json"
    path.write_text(json.dumps(data))
    assert read_json(str(path)) == data


def test_read_json_gzip(tmp_path):
    data = {"precursor_tol": {"ppm": [-50, 50]}}
    path = tmp_path / "params.json.gz"
    path.write_bytes(gzip.compress(json.dumps(data).encode()))
    assert read_json(str(path)) == data


def test_read_json_invalid(tmp_path):
    path = tmp_path / "params.json"
    path.write_text("{not json")
    with pytest.raises(CloudPathError):
        read_json(str(path))


def test_read_json_bucket_without_key():
    with pytest.raises(InvalidUriError):
        read_json("s3://my-bucket")


def test_read_json_unsupported_scheme():
    with pytest.raises(InvalidUriError):
        read_json("ftp://host/params.json")


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_json(str(tmp_path / "absent.json"))


def test_read_mzml_sets_file_id(tmp_path):
    path = tmp_path / "run.mzML"
    path.write_bytes(mzml_document("scan=9", [100.0, 200.0], [3.0, 6.0]))
    spectra = read_mzml(str(path), 4, None)
    assert len(spectra) == 1
    assert spectra[0].id == "scan=9"
    assert spectra[0].file_id == 4
    assert spectra[0].mz == [100.0, 200.0]
    assert spectra[0].intensity == [3.0, 6.0]


def test_read_mzml_gzip_with_signal_to_noise(tmp_path):
    path = tmp_path / "run.mzML.gz"
    path.write_bytes(gzip.compress(mzml_document("s", [100.0, 200.0], [3.0, 6.0], noise=[3.0, 2.0])))
    (spectrum,) = read_mzml(str(path), 0, 2)
    assert spectrum.intensity == [1.0, 3.0]
    (raw,) = read_mzml(str(path), 0, None)
    assert raw.intensity == [3.0, 6.0]