"""Mapping stream reader for translation corpora.

Reads persisted translation pairs, hands each pair to an Aligner in the
right direction and flattens the result into directed word mappings whose
source side is always the canonical language.

Counting runs as a fan-out over fixed-size batches: each batch is counted
on its own (in a worker process when workers > 1) and the partial tables
are merged by the calling process only.
"""

from abc import ABC, abstractmethod
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator
import logging
import os

from ..builder.frequency import aggregate, merge_all
from ..normalizer import normalize_word
from ..schema import NYNORSK, DirectedMapping, Language, TranslationRecord, other_language

logger = logging.getLogger(__name__)


class CorpusFormatError(ValueError):
    """Raised for unreadable records in a translation corpus."""


class Aligner(ABC):
    """Base class for word aligners.

    Subclasses must implement:
        - align(source_text, target_text) -> iterable of (source, target) words
    """

    @abstractmethod
    def align(self, source_text: str, target_text: str) -> Iterable[tuple[str, str]]:
        """Yield word correspondences between two parallel texts.

        Args:
            source_text: Text in the canonical language.
            target_text: The same text in the other language.

        Yields:
            Tuples of (source_word, target_word).
        """
        pass


@dataclass
class ReadStats:
    """Result of reading a translation corpus."""

    source_path: str
    total_records: int = 0
    total_batches: int = 0
    total_mappings: int = 0
    distinct_mappings: int = 0

    def __repr__(self) -> str:
        return (
            f"ReadStats({Path(self.source_path).name}: "
            f"{self.total_records} records, {self.total_batches} batches, "
            f"{self.distinct_mappings}/{self.total_mappings} distinct mappings)"
        )


class MappingReader:
    """Reads a translation corpus into directed word mappings."""

    def __init__(
        self,
        aligner: Aligner,
        canonical_language: Language = NYNORSK,
        batch_size: int = 1000,
        workers: int = 1,
    ):
        """Initialize reader.

        Args:
            aligner: Aligner producing word correspondences per pair.
            canonical_language: Language whose words become mapping sources.
            batch_size: Records per unit of work.
            workers: Worker processes for counting (0 = one per CPU,
                1 = count in this process).
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if workers < 0:
            raise ValueError(f"workers must be >= 0, got {workers}")
        self.aligner = aligner
        self.canonical_language = canonical_language
        self.batch_size = batch_size
        self.workers = workers or os.cpu_count() or 1

    def parse(self, filepath: Path | str) -> Iterator[TranslationRecord]:
        """Parse a JSON-lines corpus.

        Args:
            filepath: Path to corpus file.

        Yields:
            TranslationRecord per non-blank line.

        Raises:
            CorpusFormatError: On malformed JSON or an invalid record.
        """
        with open(filepath, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield TranslationRecord.from_json(line)
                except ValueError as e:
                    raise CorpusFormatError(f"{filepath}:{line_num}: {e}") from e

    def mappings_for(self, record: TranslationRecord) -> list[DirectedMapping]:
        """Align one record with the canonical language on the source side."""
        if record.from_language == self.canonical_language:
            pairs = self.aligner.align(record.original, record.translation)
        elif record.from_language == other_language(self.canonical_language):
            pairs = self.aligner.align(record.translation, record.original)
        else:
            raise CorpusFormatError(f"Invalid input language: {record.from_language.code}")

        mappings = []
        for source, target in pairs:
            source = normalize_word(source)
            target = normalize_word(target)
            if source is None or target is None:
                continue
            mappings.append(DirectedMapping(source=source, target=target))
        return mappings

    def count_batch(self, batch: list[TranslationRecord]) -> Counter:
        """Count mappings within one batch."""
        return aggregate(m for record in batch for m in self.mappings_for(record))

    def batches(self, filepath: Path | str) -> Iterator[list[TranslationRecord]]:
        """Group parsed records into lists of batch_size."""
        records = self.parse(filepath)
        while True:
            batch = list(islice(records, self.batch_size))
            if not batch:
                return
            yield batch

    def stream(self, filepath: Path | str) -> Iterator[DirectedMapping]:
        """Yield every directed mapping in corpus order."""
        for record in self.parse(filepath):
            yield from self.mappings_for(record)

    def frequencies(self, filepath: Path | str) -> tuple[Counter, ReadStats]:
        """Count mappings over the whole corpus.

        Args:
            filepath: Path to corpus file.

        Returns:
            Tuple of (frequency table, ReadStats).
        """
        stats = ReadStats(source_path=str(Path(filepath).resolve()))

        def counted(batches: Iterable[list[TranslationRecord]]) -> Iterator[list[TranslationRecord]]:
            for batch in batches:
                stats.total_records += len(batch)
                stats.total_batches += 1
                yield batch

        batches = counted(self.batches(filepath))

        if self.workers == 1:
            table = merge_all(self.count_batch(batch) for batch in batches)
        else:
            table = merge_all(self._count_parallel(batches))

        stats.total_mappings = sum(table.values())
        stats.distinct_mappings = len(table)
        logger.info("Read %r", stats)
        return table, stats

    def _count_parallel(self, batches: Iterator[list[TranslationRecord]]) -> Iterator[Counter]:
        """Count batches in worker processes, a bounded window at a time."""
        window = self.workers * 2
        with ProcessPoolExecutor(max_workers=self.workers) as executor:
            while True:
                chunk = list(islice(batches, window))
                if not chunk:
                    return
                yield from executor.map(_count_batch, [self] * len(chunk), chunk)


def _count_batch(reader: MappingReader, batch: list[TranslationRecord]) -> Counter:
    """Module-level entry point so worker processes can unpickle the task."""
    return reader.count_batch(batch)
