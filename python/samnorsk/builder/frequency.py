"""Frequency aggregation for directed word mappings.

Counting is split into a per-shard count and an associative, commutative
merge, so partial tables from parallel batches can be combined in any order
and still give the same final table.

Views:
    forward: source word -> [(target, count), ...]
    reverse: target word -> [(source, count), ...]  (derived, never populated)
"""

from collections import Counter
from typing import Iterable

from ..schema import DirectedMapping, WordAndFrequency

FrequencyTable = dict[DirectedMapping, int]
AggregatedMap = dict[str, list[WordAndFrequency]]


def aggregate(mappings: Iterable[DirectedMapping]) -> Counter:
    """Count occurrences of each distinct mapping.

    Args:
        mappings: Stream of directed mappings.

    Returns:
        Counter keyed by mapping; every present count is positive.
    """
    return Counter(mappings)


def merge(a: FrequencyTable, b: FrequencyTable) -> Counter:
    """Sum two frequency tables without modifying either."""
    merged = Counter(a)
    merged.update(b)
    return merged


def merge_all(tables: Iterable[FrequencyTable]) -> Counter:
    """Fold a sequence of shard tables into one.

    The accumulator is private to this call, so there is exactly one writer
    regardless of where the shard tables were produced.
    """
    merged: Counter = Counter()
    for table in tables:
        merged.update(table)
    return merged


def reverse_table(table: FrequencyTable) -> dict[DirectedMapping, int]:
    """Return the table with source and target roles swapped."""
    return {mapping.reversed(): count for mapping, count in table.items()}


def aggregate_by_source(table: FrequencyTable, cutoff: int) -> AggregatedMap:
    """Group mappings by source word, keeping counts above cutoff.

    Args:
        table: Frequency table.
        cutoff: Counts must be strictly greater than this to be kept.

    Returns:
        Source word -> candidates sorted by descending count, then word.
    """
    aggregated: AggregatedMap = {}
    for mapping, count in table.items():
        if count <= cutoff:
            continue
        aggregated.setdefault(mapping.source, []).append(
            WordAndFrequency(word=mapping.target, frequency=count)
        )

    for candidates in aggregated.values():
        candidates.sort(key=lambda c: (-c.frequency, c.word))
    return aggregated
