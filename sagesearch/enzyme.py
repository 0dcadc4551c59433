"""Enzymatic digestion of protein sequences into peptides."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Optional

VALID_AA = frozenset("ACDEFGHIKLMNPQRSTVWYUO")


class Position(enum.Enum):
    """Where a digested peptide sits within its protein."""

    NTERM = "nterm"
    CTERM = "cterm"
    FULL = "full"
    INTERNAL = "internal"


@dataclass(eq=False)
class Digest:
    """A peptide produced by an enzymatic digest.

    Two digests are equal, and hash alike, exactly when their sequences and
    positions are equal; decoy status and origin are ignored.
    """

    decoy: bool = False
    sequence: str = ""
    protein: str = ""
    missed_cleavages: int = 0
    position: Position = Position.INTERNAL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return self.sequence == other.sequence and self.position == other.position

    def __hash__(self) -> int:
        return hash((self.sequence, self.position))

    def reverse(self) -> Digest:
        """Return a decoy made by reversing the sequence, keeping the terminal residues."""
        if self.decoy:
            return Digest(
                decoy=self.decoy,
                sequence=self.sequence,
                protein=self.protein,
                missed_cleavages=self.missed_cleavages,
                position=self.position,
            )
        residues = list(reversed(self.sequence))
        if residues:
            residues[0], residues[-1] = residues[-1], residues[0]
        return Digest(
            decoy=True,
            sequence="".join(residues),
            protein=self.protein,
            missed_cleavages=self.missed_cleavages,
            position=self.position,
        )


@dataclass
class Enzyme:
    """A cleavage rule: a residue pattern, an optional blocking residue and a side."""

    pattern: re.Pattern
    skip_suffix: Optional[str] = None
    c_terminal: bool = True

    def cleavage_sites(self, sequence: str) -> list[tuple[int, int]]:
        """Split ``sequence`` into contiguous ``(start, end)`` ranges at cleavage sites."""
        ranges: list[tuple[int, int]] = []
        left = 0
        for match in self.pattern.finditer(sequence):
            right = match.end() if self.c_terminal else match.start()
            if (
                self.skip_suffix is not None
                and right < len(sequence)
                and sequence.startswith(self.skip_suffix, right)
            ):
                continue
            ranges.append((left, right))
            left = right
        ranges.append((left, len(sequence)))
        return ranges


def make_enzyme(
    cleave: str, skip_suffix: Optional[str] = None, c_terminal: bool = True
) -> Optional[Enzyme]:
    """Build an enzyme from the residues it cleaves at.

    An empty ``cleave`` means a non-specific digest and returns ``None``;
    ``"$"`` means no digestion at all. Raises ``ValueError`` on characters
    that are not amino acids.
    """
    if cleave != "$" and not all(residue in VALID_AA for residue in cleave):
        raise ValueError(
            f"Enzyme cleavage sequence contains non-amino acid characters: {cleave}"
        )
    if skip_suffix is not None and (len(skip_suffix) != 1 or skip_suffix not in VALID_AA):
        raise ValueError(
            f"Enzyme cleavage restriction is non-amino acid character: {skip_suffix}"
        )

    if cleave == "":
        return None
    if cleave == "$":
        return Enzyme(pattern=re.compile("$"), skip_suffix=None, c_terminal=True)
    return Enzyme(
        pattern=re.compile(f"[{cleave}]"),
        skip_suffix=skip_suffix,
        c_terminal=c_terminal,
    )


@dataclass
class EnzymeParameters:
    """Digestion settings: missed cleavages, inclusive length bounds and the enzyme."""

    missed_cleavages: int = 0
    min_len: int = 5
    max_len: int = 50
    enzyme: Optional[Enzyme] = field(default=None)

    def cleavage_sites(self, sequence: str) -> list[tuple[int, int]]:
        """Ranges to digest; every window of allowed length when no enzyme is set."""
        if self.enzyme is not None:
            return self.enzyme.cleavage_sites(sequence)
        n = len(sequence)
        return [
            (start, start + length)
            for length in range(self.min_len, min(self.max_len, n) + 1)
            for start in range(n - length + 1)
        ]

    def digest(self, sequence: str, protein: str = "") -> list[Digest]:
        """Digest ``sequence`` into unique peptides within the length bounds."""
        n = len(sequence)
        sites = self.cleavage_sites(sequence)
        missed_cleavages = 0 if self.enzyme is None else self.missed_cleavages

        seen: set[str] = set()
        digests: list[Digest] = []
        for cleavage in range(1, missed_cleavages + 2):
            for first, last in zip(sites, sites[cleavage - 1:]):
                start, end = first[0], last[1]
                if start > end or end > n:
                    continue
                peptide = sequence[start:end]
                length = len(peptide)
                if not (self.min_len <= length <= self.max_len and length > 0):
                    continue
                if peptide in seen:
                    continue
                seen.add(peptide)

                if start == 0 and end == n:
                    position = Position.FULL
                elif start == 0:
                    position = Position.NTERM
                elif end == n:
                    position = Position.CTERM
                else:
                    position = Position.INTERNAL

                digests.append(
                    Digest(
                        decoy=False,
                        sequence=peptide,
                        protein=protein,
                        missed_cleavages=cleavage - 1,
                        position=position,
                    )
                )
        return digests