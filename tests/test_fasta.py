import pytest

from sagesearch.enzyme import EnzymeParameters, make_enzyme
from sagesearch.fasta import Fasta

DIGESTION_FASTA = """
        >sp|AAAAA
        MEWKLEQSMREQALLKAQLTQLK
        >sp|BBBBB
        RMEWKLEQSMREQALLKAQLTQLK
        """

DECOY_FASTA = """>sp|TARGET some description
MEWKLEQSMR
EQALLK
>rev_sp|TARGET
RMSQELKWEM
"""


def trypsin():
    return EnzymeParameters(
        missed_cleavages=0, min_len=2, max_len=50, enzyme=make_enzyme("KR", "P", True)
    )


def test_parse_targets_from_source_example():
    fasta = Fasta.parse(DIGESTION_FASTA, "rev_", False)
    assert fasta.targets == [
        ("sp|AAAAA", "MEWKLEQSMREQALLKAQLTQLK"),
        ("sp|BBBBB", "RMEWKLEQSMREQALLKAQLTQLK"),
    ]


def test_parse_joins_lines_and_takes_first_token():
    fasta = Fasta.parse(DECOY_FASTA, "rev_", False)
    assert fasta.targets[0] == ("sp|TARGET", "MEWKLEQSMR" + "EQALLK")
    assert len(fasta.targets) == 2


def test_parse_drops_decoys_when_generating():
    fasta = Fasta.parse(DECOY_FASTA, "rev_", True)
    assert [acc for acc, _ in fasta.targets] == ["sp|TARGET"]


def test_parse_keeps_decoys_when_not_generating():
    fasta = Fasta.parse(DECOY_FASTA, "rev_", False)
    assert [acc for acc, _ in fasta.targets] == ["sp|TARGET", "rev_sp|TARGET"]


def test_parse_empty_contents():
    fasta = Fasta.parse("", "rev_", True)
    assert fasta.targets == []
    assert fasta.decoy_tag == "rev_"


def test_parse_header_without_sequence_is_skipped():
    fasta = Fasta.parse(">sp|EMPTY\n>sp|FULL\nPEPTIDEK\n", "rev_", True)
    assert fasta.targets == [("sp|FULL", "PEPTIDEK")]


def test_parse_sequence_without_accession_raises():
    with pytest.raises(ValueError):
        Fasta.parse("PEPTIDEK\n", "rev_", True)


def test_digest_marks_decoy_proteins():
    fasta = Fasta.parse(DECOY_FASTA, "rev_", False)
    digests = fasta.digest(trypsin())
    assert digests
    for digest in digests:
        assert digest.decoy == digest.protein.startswith("rev_")
    assert any(d.decoy for d in digests)


def test_digest_without_decoys_when_generating():
    fasta = Fasta.parse(DECOY_FASTA, "rev_", True)
    digests = fasta.digest(trypsin())
    assert digests
    assert not any(d.decoy for d in digests)
    assert {d.protein for d in digests} == {"sp|TARGET"}


def test_digest_matches_per_protein_digest():
    fasta = Fasta.parse(DIGESTION_FASTA, "rev_", False)
    enzyme = trypsin()
    expected = []
    for protein, sequence in fasta.targets:
        expected.extend(d.sequence for d in enzyme.digest(sequence, protein))
    assert [d.sequence for d in fasta.digest(enzyme)] == expected


def test_digest_peptides_are_substrings_of_their_protein():
    fasta = Fasta.parse(DIGESTION_FASTA, "rev_", False)
    sequences = dict(fasta.targets)
    for digest in fasta.digest(trypsin()):
        assert digest.sequence in sequences[digest.protein]