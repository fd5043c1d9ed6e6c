"""Corpus ingestion module.

Provides the pieces that turn raw text into directed word mappings:
- Wikipedia dump download and Apertium translation (corpus building)
- Pluggable aligners mapping words between parallel texts
- The mapping reader that streams and counts corpus mappings

Usage:
    from samnorsk.ingest import MappingReader, get_aligner

    reader = MappingReader(get_aligner("token_discrepancy")())
    table, stats = reader.frequencies("translations.jsonl")
"""

from .base import Aligner, CorpusFormatError, MappingReader, ReadStats
from .aligner import TokenDiscrepancyAligner, token_discrepancy
from . import wikidump

# Register available aligners
ALIGNERS: dict[str, type[Aligner]] = {
    "token_discrepancy": TokenDiscrepancyAligner,
}


def get_aligner(name: str) -> type[Aligner]:
    """Get aligner class by name."""
    if name not in ALIGNERS:
        raise ValueError(f"Unknown aligner: {name}. Available: {list(ALIGNERS.keys())}")
    return ALIGNERS[name]


def register_aligner(name: str, aligner_cls: type[Aligner]) -> None:
    """Register a custom aligner."""
    ALIGNERS[name] = aligner_cls


__all__ = [
    "Aligner",
    "CorpusFormatError",
    "MappingReader",
    "ReadStats",
    "TokenDiscrepancyAligner",
    "token_discrepancy",
    "wikidump",
    "get_aligner",
    "register_aligner",
    "ALIGNERS",
]
