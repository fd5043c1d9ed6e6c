"""Synonym builder module.

Turns mapping counts into a synonym file:
- Frequency tables with an associative merge
- Mutual-consistency filtering of candidates
- Reduction or expansion synonym output
"""

from .frequency import aggregate, merge, merge_all, reverse_table, aggregate_by_source
from .synonyms import SynonymFilter, build_synonym_lines, create_synonyms
from .writer import WriteStats, format_line, write_synonyms

__all__ = [
    "aggregate",
    "merge",
    "merge_all",
    "reverse_table",
    "aggregate_by_source",
    "SynonymFilter",
    "build_synonym_lines",
    "create_synonyms",
    "WriteStats",
    "format_line",
    "write_synonyms",
]
