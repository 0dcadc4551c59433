[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sagesearch"
version = "0.1.0"
description = "Proteomics search building blocks: enzymatic digestion, FASTA and mzML reading, local and S3 paths, isotope envelopes and sorted-range lookups"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "proteomics",
    "mass-spectrometry",
    "mzml",
    "fasta",
    "peptide",
    "digestion",
    "bioinformatics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["sagesearch"]

[tool.hatch.build.targets.sdist]
include = [
    "sagesearch",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
