"""Token discrepancy aligner.

Machine translation between Bokmål and Nynorsk keeps sentence structure
almost intact, so a diff of the two token sequences lines up most words.
The tokens that differ at the same position are taken as correspondences.

Example:
    "ba foo fnark" / "ba feh fnark" -> {"foo": "feh"}
"""

from difflib import SequenceMatcher
from typing import Iterator
import logging

from ..normalizer import segment_sentences, tokenize
from .base import Aligner

logger = logging.getLogger(__name__)


def token_discrepancy(source_sentence: str, target_sentence: str) -> dict[str, str]:
    """Map differing tokens of two parallel sentences.

    Replaced spans of equal length are paired token by token. When the
    lengths differ only the first token on each side is paired, since
    only that position is anchored by the preceding match.

    Args:
        source_sentence: Sentence in the canonical language.
        target_sentence: Its translation.

    Returns:
        Source token -> target token. A later pair for the same source
        token replaces an earlier one.
    """
    source_tokens = tokenize(source_sentence)
    target_tokens = tokenize(target_sentence)
    matcher = SequenceMatcher(a=source_tokens, b=target_tokens, autojunk=False)

    discrepancies: dict[str, str] = {}
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag != "replace":
            continue
        if i2 - i1 == j2 - j1:
            for source, target in zip(source_tokens[i1:i2], target_tokens[j1:j2]):
                discrepancies[source] = target
        else:
            discrepancies[source_tokens[i1]] = target_tokens[j1]
    return discrepancies


class TokenDiscrepancyAligner(Aligner):
    """Aligner pairing sentences in order and diffing their tokens."""

    def align(self, source_text: str, target_text: str) -> Iterator[tuple[str, str]]:
        source_sentences = segment_sentences(source_text)
        target_sentences = segment_sentences(target_text)

        if len(source_sentences) != len(target_sentences):
            logger.debug(
                "Skipping pair with %d vs %d sentences",
                len(source_sentences),
                len(target_sentences),
            )
            return

        for source, target in zip(source_sentences, target_sentences):
            yield from token_discrepancy(source, target).items()
