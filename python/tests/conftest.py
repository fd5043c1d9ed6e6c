"""Pytest configuration and fixtures."""

import json
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def make_record(original: str, translation: str, from_language: str, to_language: str) -> str:
    """Serialize one corpus line."""
    return json.dumps({
        "original": original,
        "translation": translation,
        "fromLanguage": from_language,
        "toLanguage": to_language,
    }, ensure_ascii=False)


@pytest.fixture
def sample_corpus_lines():
    """Six records yielding eg->jeg, ikkje->ikke, heime->hjemme six times each."""
    nn_to_nb = make_record("Eg er ikkje heime.", "Jeg er ikke hjemme.", "nn", "nb")
    nb_to_nn = make_record("Jeg er ikke hjemme.", "Eg er ikkje heime.", "nb", "nn")
    return [nn_to_nb, nb_to_nn] * 3


@pytest.fixture
def sample_corpus(tmp_path, sample_corpus_lines):
    """Sample corpus written to a JSON-lines file."""
    path = tmp_path / "translations.jsonl"
    path.write_text("\n".join(sample_corpus_lines) + "\n", encoding="utf-8")
    return path
