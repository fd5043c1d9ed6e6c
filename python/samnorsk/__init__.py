"""samnorsk - Bokmål/Nynorsk synonym toolkit.

Derives search-engine synonyms from machine-translated Wikipedia articles.

Core concepts:
    - Articles are translated nb -> nn and nn -> nb with Apertium
    - Aligned sentence pairs yield directed word mappings
    - Mappings seen often enough, and consistently in both directions,
      become synonym lines

Example:
    "ikkje" (NN) <-> "ikke" (NB), seen thousands of times
    Reduction line: "ikke => ikkje"

Usage:
    from samnorsk.ingest import MappingReader, TokenDiscrepancyAligner
    from samnorsk.builder import create_synonyms, write_synonyms

    reader = MappingReader(TokenDiscrepancyAligner(), workers=4)
    table, stats = reader.frequencies("translations.jsonl")

    lines = create_synonyms(table, cutoff=5, relative_threshold=0.3)
    write_synonyms(lines, "synonyms.txt", expansion=False)
"""

__version__ = "0.1.0"
