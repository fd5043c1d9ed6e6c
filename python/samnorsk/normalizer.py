"""Text normalization for samnorsk.

Splits article text into sentences and sentences into lower-cased word
tokens. Norwegian letters (æ, ø, å) are kept as they are, since they are
often exactly what tells Bokmål and Nynorsk spellings apart.
"""

import re
from typing import Optional

# Sentence ends at . ! or ? (plus closing quotes/brackets) followed by whitespace
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])[\"'»)\]]*\s+")

TOKEN_PATTERN = re.compile(r"\w+(?:[-']\w+)*")

WORD_PATTERN = re.compile(r"^[^\W\d_]+(?:[-'][^\W\d_]+)*$")


def segment_sentences(text: str) -> list[str]:
    """Split text into sentences.

    Args:
        text: Article or paragraph text.

    Returns:
        Non-empty, stripped sentences in order.
    """
    sentences = []
    start = 0
    for match in SENTENCE_BOUNDARY.finditer(text):
        sentence = text[start:match.end()].strip()
        if sentence:
            sentences.append(sentence)
        start = match.end()

    tail = text[start:].strip()
    if tail:
        sentences.append(tail)
    return sentences


def tokenize(sentence: str) -> list[str]:
    """Split a sentence into lower-cased tokens, dropping punctuation."""
    return [m.group(0).lower() for m in TOKEN_PATTERN.finditer(sentence)]


def is_valid_word(word: str) -> bool:
    """Check if word is usable as a mapping endpoint (letters only).

    Args:
        word: Candidate word.

    Returns:
        True for non-empty alphabetic words, allowing inner - and '.
    """
    return bool(WORD_PATTERN.match(word))


def normalize_word(word: str) -> Optional[str]:
    """Normalize word and return if valid, else None.

    Args:
        word: Raw word.

    Returns:
        Stripped lower-case word or None if invalid.
    """
    normalized = word.strip().lower()
    if is_valid_word(normalized):
        return normalized
    return None
