"""Data structures for samnorsk.

Core concept:
    - Translation pairs are persisted one JSON record per line
    - Aligned pairs yield directed word mappings (canonical side -> other side)
    - Mapping counts are filtered into synonym lines

Example:
    "eg er ikkje heime" (NN) / "jeg er ikke hjemme" (NB)
    -> mappings eg->jeg, ikkje->ikke, heime->hjemme
    -> "jeg => eg" when reducing to Nynorsk
"""

from dataclasses import dataclass
from typing import Any
import json


@dataclass(frozen=True)
class Language:
    """One of the two written standards handled by the pipeline."""

    code: str       # Code used in corpus records, e.g. "nn"
    wiki: str       # Wikipedia subdomain, e.g. "no" for Bokmål
    apertium: str   # Apertium language code, e.g. "nob"


NYNORSK = Language(code="nn", wiki="nn", apertium="nno")
BOKMAAL = Language(code="nb", wiki="no", apertium="nob")

LANGUAGES: dict[str, Language] = {
    NYNORSK.code: NYNORSK,
    BOKMAAL.code: BOKMAAL,
}


def get_language(code: str) -> Language:
    """Get language by record code."""
    if code not in LANGUAGES:
        raise ValueError(f"Unknown language: {code!r}. Available: {list(LANGUAGES.keys())}")
    return LANGUAGES[code]


def other_language(language: Language) -> Language:
    """Return the opposite written standard."""
    return BOKMAAL if language == NYNORSK else NYNORSK


@dataclass(frozen=True)
class TranslationRecord:
    """An article (or chunk) and its machine translation."""

    original: str
    translation: str
    from_language: Language
    to_language: Language

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "translation": self.translation,
            "fromLanguage": self.from_language.code,
            "toLanguage": self.to_language.code,
        }

    def to_json(self) -> str:
        """Serialize as a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranslationRecord":
        """Create from dictionary.

        Only fromLanguage decides the direction. toLanguage is not read;
        the target is always the other written standard.

        Raises:
            ValueError: If a field is missing, a text is not a string or
                fromLanguage is unknown.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        for key in ("original", "translation", "fromLanguage"):
            if key not in data:
                raise ValueError(f"Missing field: {key}")
        for key in ("original", "translation"):
            if not isinstance(data[key], str):
                raise ValueError(f"Field {key} must be a string")

        from_language = get_language(data["fromLanguage"])
        return cls(
            original=data["original"],
            translation=data["translation"],
            from_language=from_language,
            to_language=other_language(from_language),
        )

    @classmethod
    def from_json(cls, line: str) -> "TranslationRecord":
        """Parse one JSON line."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True)
class DirectedMapping:
    """One source -> target word correspondence.

    Identity is the word pair only; the language orientation is fixed by
    the reader before counting.
    """

    source: str
    target: str

    def reversed(self) -> "DirectedMapping":
        """Swap source and target roles."""
        return DirectedMapping(source=self.target, target=self.source)


@dataclass(frozen=True)
class WordAndFrequency:
    """A synonym candidate with its observed mapping count."""

    word: str
    frequency: int


@dataclass(frozen=True)
class SynonymLine:
    """A canonical form and the words that normalize to it."""

    synonyms: tuple[str, ...]
    canonical_form: str

    def __post_init__(self):
        """Enforce distinct synonyms that exclude the canonical form."""
        if self.canonical_form in self.synonyms:
            raise ValueError(
                f"Canonical form {self.canonical_form!r} listed as its own synonym"
            )
        if len(set(self.synonyms)) != len(self.synonyms):
            raise ValueError(f"Duplicate synonyms for {self.canonical_form!r}")

    def reduction_synonyms(self) -> str:
        """Render as "a,b => canonical"."""
        return ",".join(self.synonyms) + " => " + self.canonical_form

    def expansion_synonyms(self) -> str:
        """Render as "a,b,canonical"."""
        return ",".join(self.synonyms + (self.canonical_form,))
