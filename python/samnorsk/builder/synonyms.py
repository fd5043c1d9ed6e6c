"""Synonym extraction from mapping frequencies.

A target word t becomes a synonym of source word s when:
    - the mapping s -> t was seen more than `cutoff` times
    - s is the most frequent origin of t (mutual best match)
    - its count exceeds `relative_threshold` times the best count for s
    - t is not itself a canonical source with synonyms of its own

A second pass looks at s from the reverse direction (words that map onto s)
to recover synonyms the forward pass misses when counts are asymmetric.
"""

from dataclasses import dataclass, field
import logging

from ..schema import SynonymLine, WordAndFrequency
from .frequency import AggregatedMap, FrequencyTable, aggregate_by_source, reverse_table

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF = 5
DEFAULT_RELATIVE_THRESHOLD = 0.3


def best_candidate(candidates: list[WordAndFrequency]) -> WordAndFrequency | None:
    """Highest frequency wins; ties go to the lexicographically smallest word."""
    if not candidates:
        return None
    return min(candidates, key=lambda c: (-c.frequency, c.word))


@dataclass
class FilterStats:
    """Statistics from a filter run."""

    distinct_mappings: int = 0
    forward_sources: int = 0
    reverse_sources: int = 0
    mutual_sources: int = 0
    candidate_sources: int = 0


class SynonymFilter:
    """Mutual-consistency filter over a frequency table."""

    def __init__(
        self,
        cutoff: int = DEFAULT_CUTOFF,
        relative_threshold: float = DEFAULT_RELATIVE_THRESHOLD,
    ):
        """Initialize filter.

        Args:
            cutoff: Mapping counts must be strictly greater than this.
            relative_threshold: Fraction of the best count a candidate
                must strictly exceed.
        """
        if cutoff < 0:
            raise ValueError(f"cutoff must be >= 0, got {cutoff}")
        if not 0.0 <= relative_threshold <= 1.0:
            raise ValueError(
                f"relative_threshold must be within [0, 1], got {relative_threshold}"
            )
        self.cutoff = cutoff
        self.relative_threshold = relative_threshold
        self.stats = FilterStats()

    def candidates(self, table: FrequencyTable) -> dict[str, list[WordAndFrequency]]:
        """Compute reliable synonym candidates per source word.

        Args:
            table: Frequency table (read only).

        Returns:
            Source word -> deduplicated candidates from both passes.
        """
        forward = aggregate_by_source(table, self.cutoff)
        reverse = aggregate_by_source(reverse_table(table), self.cutoff)

        # target -> its most frequent origin
        mutual_best = {
            target: best_candidate(origins).word
            for target, origins in reverse.items()
        }
        filtered: AggregatedMap = {
            source: [c for c in targets if mutual_best.get(c.word) == source]
            for source, targets in forward.items()
        }

        def above_threshold(candidates: list[WordAndFrequency]) -> list[WordAndFrequency]:
            if not candidates:
                return []
            highest = max(c.frequency for c in candidates)
            return [
                c for c in candidates
                if c.frequency > highest * self.relative_threshold
                and not filtered.get(c.word)
            ]

        result: dict[str, list[WordAndFrequency]] = {}
        for source, kept in filtered.items():
            if not kept:
                continue

            merged: dict[str, WordAndFrequency] = {}
            for candidate in above_threshold(kept) + above_threshold(reverse.get(source, [])):
                merged.setdefault(candidate.word, candidate)
            result[source] = list(merged.values())

        self.stats = FilterStats(
            distinct_mappings=len(table),
            forward_sources=len(forward),
            reverse_sources=len(reverse),
            mutual_sources=sum(1 for kept in filtered.values() if kept),
            candidate_sources=sum(1 for kept in result.values() if kept),
        )
        logger.info(
            "Filtered %d distinct mappings: %d sources above cutoff, %d with mutual matches",
            self.stats.distinct_mappings,
            self.stats.forward_sources,
            self.stats.mutual_sources,
        )
        return result


def build_synonym_lines(
    candidates: dict[str, list[WordAndFrequency]],
) -> list[SynonymLine]:
    """Turn candidate sets into synonym lines.

    Args:
        candidates: Source word -> candidates.

    Returns:
        Lines sorted by canonical form. Sources left without synonyms after
        removing the source word itself are dropped.
    """
    lines = []
    for source in sorted(candidates):
        synonyms = sorted({c.word for c in candidates[source]} - {source})
        if not synonyms:
            continue
        lines.append(SynonymLine(synonyms=tuple(synonyms), canonical_form=source))
    return lines


def create_synonyms(
    table: FrequencyTable,
    cutoff: int = DEFAULT_CUTOFF,
    relative_threshold: float = DEFAULT_RELATIVE_THRESHOLD,
) -> list[SynonymLine]:
    """Filter a frequency table and build synonym lines in one step."""
    synonym_filter = SynonymFilter(cutoff=cutoff, relative_threshold=relative_threshold)
    return build_synonym_lines(synonym_filter.candidates(table))
