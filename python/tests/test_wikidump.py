"""Tests for Wikipedia dump ingestion and Apertium translation."""

import gzip
import json
import pytest
import subprocess
from pathlib import Path

from samnorsk.ingest import wikidump
from samnorsk.ingest.wikidump import (
    ARTICLE_SEPARATOR,
    DUMP_INDEX_URL,
    ApertiumTranslator,
    WikiDumpSource,
    extract_corpus,
    iter_articles,
)
from samnorsk.schema import BOKMAAL, NYNORSK

INDEX_HTML = """<html><body><pre>
<a href="nnwiki-20240101-cirrussearch-content.json.gz">nnwiki-20240101-cirrussearch-content.json.gz</a>  02-Jan-2024 10:00  1234
<a href="nnwiki-20240101-cirrussearch-general.json.gz">nnwiki-20240101-cirrussearch-general.json.gz</a>  02-Jan-2024 10:00  5678
<a href="nowiki-20240101-cirrussearch-content.json.gz">nowiki-20240101-cirrussearch-content.json.gz</a>  02-Jan-2024 11:00  9999
</pre></body></html>
"""


class FakeResponse:
    """Minimal urlopen response."""

    def __init__(self, body: str):
        self.body = body.encode("utf-8")

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


def write_dump(path: Path, lines: list[dict]) -> Path:
    """Write JSON lines to a gzipped dump."""
    with gzip.open(path, "wt", encoding="utf-8") as f:
        for line in lines:
            f.write(json.dumps(line, ensure_ascii=False) + "\n")
    return path


class TestWikiDumpSource:
    """Tests for WikiDumpSource."""

    def test_latest_dump_url(self, monkeypatch):
        """Test URL built from the single dump date."""
        monkeypatch.setattr(wikidump.urllib.request, "urlopen", lambda url: FakeResponse(INDEX_HTML))
        source = WikiDumpSource(NYNORSK, cache_dir="/tmp")
        assert source.latest_dump_url() == (
            f"{DUMP_INDEX_URL}nnwiki-20240101-cirrussearch-content.json.gz"
        )

    def test_latest_dump_url_bokmaal_uses_no_wiki(self, monkeypatch):
        """Test Bokmål dumps live under the "no" wiki."""
        monkeypatch.setattr(wikidump.urllib.request, "urlopen", lambda url: FakeResponse(INDEX_HTML))
        url = WikiDumpSource(BOKMAAL, cache_dir="/tmp").latest_dump_url()
        assert url.endswith("nowiki-20240101-cirrussearch-content.json.gz")

    def test_latest_dump_url_ambiguous(self, monkeypatch):
        """Test more than one date is an error."""
        index = INDEX_HTML + '<a href="nnwiki-20240108-cirrussearch-content.json.gz">x</a>\n'
        monkeypatch.setattr(wikidump.urllib.request, "urlopen", lambda url: FakeResponse(index))
        with pytest.raises(ValueError, match="Unable to find latest date"):
            WikiDumpSource(NYNORSK, cache_dir="/tmp").latest_dump_url()

    def test_latest_dump_url_missing(self, monkeypatch):
        """Test no dump for the language is an error."""
        monkeypatch.setattr(wikidump.urllib.request, "urlopen", lambda url: FakeResponse("<html></html>"))
        with pytest.raises(ValueError):
            WikiDumpSource(NYNORSK, cache_dir="/tmp").latest_dump_url()

    def test_download_and_cache(self, tmp_path, monkeypatch):
        """Test download once, then reuse the cached file."""
        calls = []

        def fake_retrieve(url, path):
            calls.append(url)
            Path(path).write_bytes(b"dump")

        monkeypatch.setattr(WikiDumpSource, "latest_dump_url", lambda self: "https://example/nn.json.gz")
        monkeypatch.setattr(wikidump.urllib.request, "urlretrieve", fake_retrieve)

        source = WikiDumpSource(NYNORSK, cache_dir=tmp_path / "cache")
        path = source.download()
        assert path == tmp_path / "cache" / "nn.json.gz"
        assert path.read_bytes() == b"dump"

        source.download()
        assert len(calls) == 1

        source.download(force=True)
        assert len(calls) == 2

    def test_resolve_given_path(self, tmp_path):
        """Test an existing dump path is used as is."""
        dump = tmp_path / "nn.json.gz"
        dump.write_bytes(b"")
        assert WikiDumpSource(NYNORSK, tmp_path).resolve(dump) == dump

    def test_resolve_missing_path(self, tmp_path):
        """Test a missing dump path is an error."""
        with pytest.raises(FileNotFoundError):
            WikiDumpSource(NYNORSK, tmp_path).resolve(tmp_path / "missing.json.gz")


class TestIterArticles:
    """Tests for iter_articles."""

    def test_filters_short_and_index_lines(self, tmp_path):
        """Test only long article texts are yielded."""
        long_text = "Nynorsk er ei av dei to offisielle målformene. " * 3
        dump = write_dump(tmp_path / "nn.json.gz", [
            {"index": {"_type": "page", "_id": "1"}},
            {"title": "Lang", "text": long_text},
            {"index": {"_type": "page", "_id": "2"}},
            {"title": "Kort", "text": "Kort."},
            {"title": "Tom", "text": None},
        ])
        assert list(iter_articles(dump)) == [long_text]

    def test_non_object_line(self, tmp_path):
        """Test a JSON line that is not an object is a dump error."""
        dump = tmp_path / "nn.json.gz"
        with gzip.open(dump, "wt", encoding="utf-8") as f:
            f.write(json.dumps({"text": "x" * 200}) + "\n")
            f.write("[1, 2]\n")
        articles = iter_articles(dump)
        assert next(articles) == "x" * 200
        with pytest.raises(ValueError, match=":2: expected a JSON object"):
            next(articles)

    def test_min_length(self, tmp_path):
        """Test custom minimum length is exclusive."""
        dump = write_dump(tmp_path / "nn.json.gz", [{"text": "abcde"}, {"text": "abcdef"}])
        assert list(iter_articles(dump, min_length=5)) == ["abcdef"]


class TestApertiumTranslator:
    """Tests for ApertiumTranslator."""

    def test_translate_invokes_apertium(self, monkeypatch):
        """Test command line and input file handed to Apertium."""
        seen = {}

        def fake_run(args, **kwargs):
            seen["args"] = args
            seen["input"] = Path(args[2]).read_text(encoding="utf-8")
            seen["path"] = Path(args[2])
            return subprocess.CompletedProcess(args, 0, stdout="Eg er her.\n", stderr="")

        monkeypatch.setattr(wikidump.subprocess, "run", fake_run)

        translator = ApertiumTranslator(command="apertium")
        result = translator.translate("Jeg er her.", BOKMAAL, NYNORSK)

        assert result == "Eg er her."
        assert seen["args"][:2] == ["apertium", "nob-nno"]
        assert seen["input"] == "Jeg er her."
        assert not seen["path"].exists()

    def test_translate_failure(self, monkeypatch):
        """Test Apertium errors propagate."""
        def fake_run(args, **kwargs):
            raise subprocess.CalledProcessError(1, args)

        monkeypatch.setattr(wikidump.subprocess, "run", fake_run)
        with pytest.raises(subprocess.CalledProcessError):
            ApertiumTranslator().translate("tekst", NYNORSK, BOKMAAL)

    def test_translate_articles_groups(self, monkeypatch):
        """Test articles are joined per group and paired back up."""
        calls = []

        def fake_translate(self, text, from_language, to_language):
            calls.append(text)
            return text.upper()

        monkeypatch.setattr(ApertiumTranslator, "translate", fake_translate)

        translator = ApertiumTranslator(group_size=2)
        records = translator.translate_articles(["ein", "to", "tre"], NYNORSK, BOKMAAL)

        assert calls == [f"ein{ARTICLE_SEPARATOR}to", "tre"]
        assert [(r.original, r.translation) for r in records] == [
            ("ein", "EIN"),
            ("to", "TO"),
            ("tre", "TRE"),
        ]
        assert all(r.from_language == NYNORSK and r.to_language == BOKMAAL for r in records)

    def test_translate_articles_threads(self, monkeypatch):
        """Test concurrent translation keeps article order."""
        monkeypatch.setattr(
            ApertiumTranslator, "translate", lambda self, text, f, t: text.upper()
        )
        translator = ApertiumTranslator(group_size=1, workers=3)
        records = translator.translate_articles(["a", "b", "c", "d"], NYNORSK, BOKMAAL)
        assert [r.translation for r in records] == ["A", "B", "C", "D"]

    def test_lost_separator(self, monkeypatch):
        """Test a translation with missing parts keeps only pairable articles."""
        monkeypatch.setattr(
            ApertiumTranslator, "translate", lambda self, text, f, t: "alt i eitt"
        )
        records = ApertiumTranslator(group_size=3).translate_articles(["a", "b", "c"], NYNORSK, BOKMAAL)
        assert [(r.original, r.translation) for r in records] == [("a", "alt i eitt")]


class TestExtractCorpus:
    """Tests for extract_corpus."""

    def test_extract_corpus(self, tmp_path, monkeypatch):
        """Test both directions are written, Bokmål first."""
        monkeypatch.setattr(
            ApertiumTranslator, "translate", lambda self, text, f, t: f"[{t.code}] {text}"
        )
        nn_dump = write_dump(tmp_path / "nn.json.gz", [{"text": "nynorsk tekst"}])
        nb_dump = write_dump(tmp_path / "nb.json.gz", [{"text": "bokmål tekst"}, {"text": "mer tekst"}])
        output = tmp_path / "translations.jsonl"
        output.write_text("gammalt innhald\n", encoding="utf-8")

        counts = extract_corpus(nn_dump, nb_dump, output, ApertiumTranslator(), min_length=0)

        assert counts == {"nb": 2, "nn": 1}
        records = [json.loads(line) for line in output.read_text(encoding="utf-8").splitlines()]
        assert records[0] == {
            "original": "bokmål tekst",
            "translation": "[nn] bokmål tekst",
            "fromLanguage": "nb",
            "toLanguage": "nn",
        }
        assert records[2]["fromLanguage"] == "nn"
        assert records[2]["translation"] == "[nb] nynorsk tekst"

    def test_chunking(self, tmp_path, monkeypatch):
        """Test chunk size does not change the records."""
        monkeypatch.setattr(ApertiumTranslator, "translate", lambda self, text, f, t: text)
        texts = [{"text": f"artikkel {i}"} for i in range(5)]
        nn_dump = write_dump(tmp_path / "nn.json.gz", texts)
        nb_dump = write_dump(tmp_path / "nb.json.gz", [])
        output = tmp_path / "translations.jsonl"

        counts = extract_corpus(nn_dump, nb_dump, output, ApertiumTranslator(), chunk_size=2, min_length=0)

        assert counts == {"nb": 0, "nn": 5}
        originals = [json.loads(line)["original"] for line in output.read_text(encoding="utf-8").splitlines()]
        assert originals == [f"artikkel {i}" for i in range(5)]
