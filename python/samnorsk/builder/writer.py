"""Synonym file writer.

Output formats (one synonym group per line):
    reduction:  syn1,syn2 => canonical
    expansion:  syn1,syn2,canonical

Reduction lines rewrite every variant to the canonical spelling at index
time. Expansion lines declare all terms equivalent for query-time matching.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..schema import SynonymLine


@dataclass
class WriteStats:
    """Statistics from a write operation."""

    path: str
    lines: int = 0
    synonyms: int = 0


def format_line(line: SynonymLine, expansion: bool) -> str:
    """Render one synonym line in expansion or reduction form."""
    if expansion:
        return line.expansion_synonyms()
    return line.reduction_synonyms()


def write_synonyms(
    lines: Iterable[SynonymLine],
    output: Path | str,
    expansion: bool,
) -> WriteStats:
    """Write synonym lines, replacing any existing file.

    Args:
        lines: Synonym lines in output order.
        output: Destination path. Parent directories are created.
        expansion: Expansion form if True, reduction form otherwise.

    Returns:
        WriteStats with counts.
    """
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    stats = WriteStats(path=str(output))

    with open(output, "w", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(format_line(line, expansion) + "\n")
            stats.lines += 1
            stats.synonyms += len(line.synonyms)

    return stats
