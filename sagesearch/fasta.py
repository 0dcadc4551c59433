"""Parsing FASTA protein databases and digesting them."""

from __future__ import annotations

from dataclasses import dataclass, field

from sagesearch.enzyme import Digest, EnzymeParameters


def _accession(header: str) -> str:
    parts = header.split()
    if not parts:
        raise ValueError("FASTA record has no accession in its header")
    return parts[0]


@dataclass
class Fasta:
    """A protein database of ``(accession, sequence)`` targets."""

    targets: list[tuple[str, str]] = field(default_factory=list)
    decoy_tag: str = "rev_"
    generate_decoys: bool = True

    @classmethod
    def parse(cls, contents: str, decoy_tag: str, generate_decoys: bool) -> Fasta:
        """Parse FASTA text.

        When ``generate_decoys`` is set, proteins whose accession contains
        ``decoy_tag`` are dropped, since decoys will be generated internally.
        """
        targets: list[tuple[str, str]] = []
        last_id = ""
        chunks: list[str] = []

        def flush() -> None:
            sequence = "".join(chunks)
            if not sequence:
                return
            accession = _accession(last_id)
            if decoy_tag not in accession or not generate_decoys:
                targets.append((accession, sequence))

        for raw in contents.splitlines():
            if not raw:
                continue
            line = raw.strip()
            if line.startswith(">"):
                flush()
                chunks.clear()
                last_id = line[1:]
            else:
                chunks.append(line)
        flush()

        return cls(targets=targets, decoy_tag=decoy_tag, generate_decoys=generate_decoys)

    def digest(self, enzyme: EnzymeParameters) -> list[Digest]:
        """Digest every protein; proteins tagged as decoys yield decoy peptides."""
        digests: list[Digest] = []
        for protein, sequence in self.targets:
            is_decoy_protein = self.decoy_tag in protein
            if is_decoy_protein and self.generate_decoys:
                continue
            for digest in enzyme.digest(sequence, protein):
                if is_decoy_protein:
                    digest.decoy = True
                digests.append(digest)
        return digests