"""Proteomics search building blocks: digestion, FASTA and mzML reading, local and S3 paths, and helpers."""

__version__ = "0.1.0"