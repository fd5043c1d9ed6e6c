"""Wikipedia dump ingestor and Apertium translation.

Builds the translation corpus the synonym mapper reads:
    1. Download the latest CirrusSearch content dump per language
    2. Extract article texts longer than a minimum length
    3. Translate them with Apertium (nob <-> nno)
    4. Append {original, translation, fromLanguage, toLanguage} JSON lines

Dumps come from https://dumps.wikimedia.org/other/cirrussearch/current/.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator
import gzip
import json
import logging
import os
import re
import subprocess
import tempfile
import urllib.request

from ..schema import BOKMAAL, NYNORSK, Language, TranslationRecord

logger = logging.getLogger(__name__)

DUMP_INDEX_URL = "https://dumps.wikimedia.org/other/cirrussearch/current/"
DATE_PATTERN = re.compile(r"20\d{6}")

# Apertium drops newlines, so articles are joined with a marker instead
ARTICLE_SEPARATOR = "☃☃¤"


class WikiDumpSource:
    """Locates, downloads and reads one language's CirrusSearch dump."""

    def __init__(self, language: Language, cache_dir: Path | str):
        self.language = language
        self.cache_dir = Path(cache_dir)

    def latest_dump_url(self) -> str:
        """Find the URL of the current content dump.

        Raises:
            ValueError: If the index does not list exactly one dump date.
        """
        with urllib.request.urlopen(DUMP_INDEX_URL) as response:
            index = response.read().decode("utf-8", errors="replace")

        marker = f"{self.language.wiki}wiki-"
        dates = []
        for line in index.splitlines():
            if marker not in line:
                continue
            match = DATE_PATTERN.search(line)
            if match and match.group(0) not in dates:
                dates.append(match.group(0))

        if len(dates) != 1:
            raise ValueError(
                f"Unable to find latest date for {self.language.wiki} wiki dump (found {dates})"
            )
        return f"{DUMP_INDEX_URL}{self.language.wiki}wiki-{dates[0]}-cirrussearch-content.json.gz"

    def get_cached_path(self) -> Path:
        """Get path where downloaded dump should be cached."""
        return self.cache_dir / f"{self.language.code}.json.gz"

    def download(self, force: bool = False) -> Path:
        """Download dump if not cached.

        Args:
            force: Force re-download even if cached.

        Returns:
            Path to cached file.
        """
        cached_path = self.get_cached_path()
        if cached_path.exists() and not force:
            logger.info("[%s] Using cached: %s", self.language.code, cached_path)
            return cached_path

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        url = self.latest_dump_url()

        logger.info("[%s] Downloading from: %s", self.language.code, url)
        urllib.request.urlretrieve(url, cached_path)
        logger.info("[%s] Saved to: %s", self.language.code, cached_path)

        return cached_path

    def resolve(self, dump_path: Path | str | None = None, force: bool = False) -> Path:
        """Use the given dump file, or download the latest one."""
        if dump_path is None:
            return self.download(force=force)

        dump_path = Path(dump_path)
        if not dump_path.exists():
            raise FileNotFoundError(f"{dump_path} does not exist.")
        return dump_path


def iter_articles(dump_path: Path | str, min_length: int = 100) -> Iterator[str]:
    """Yield article texts from a gzipped CirrusSearch dump.

    Index lines and articles without text (or with min_length characters
    or fewer) are skipped.

    Raises:
        ValueError: If a line is not a JSON object.
    """
    with gzip.open(dump_path, "rt", encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError(
                    f"{dump_path}:{line_num}: expected a JSON object, got {type(data).__name__}"
                )
            text = data.get("text")
            if isinstance(text, str) and len(text) > min_length:
                yield text


class ApertiumTranslator:
    """Translates text with the Apertium command line tool.

    Requires apertium with the nob-nno pair installed.
    Linux: apt install apertium apertium-nno-nob
    """

    def __init__(self, command: str = "apertium", group_size: int = 100, workers: int = 1):
        """Initialize translator.

        Args:
            command: Apertium executable.
            group_size: Articles per Apertium invocation.
            workers: Concurrent Apertium processes.
        """
        self.command = command
        self.group_size = group_size
        self.workers = max(1, workers)

    def translate(self, text: str, from_language: Language, to_language: Language) -> str:
        """Translate one block of text.

        Raises:
            subprocess.CalledProcessError: If Apertium exits non-zero.
        """
        fd, input_path = tempfile.mkstemp(prefix="apertium-input", suffix=from_language.code)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            result = subprocess.run(
                [self.command, f"{from_language.apertium}-{to_language.apertium}", input_path],
                capture_output=True,
                encoding="utf-8",
                check=True,
            )
            return result.stdout.strip()
        finally:
            os.unlink(input_path)

    def translate_articles(
        self,
        articles: list[str],
        from_language: Language,
        to_language: Language,
    ) -> list[TranslationRecord]:
        """Translate articles in groups and pair them with their originals.

        Articles whose translation cannot be matched up (separator lost by
        the translator) are dropped with the rest of their group's tail.
        """
        groups = [
            articles[i:i + self.group_size]
            for i in range(0, len(articles), self.group_size)
        ]
        texts = [ARTICLE_SEPARATOR.join(group) for group in groups]

        def run(text: str) -> str:
            return self.translate(text, from_language, to_language)

        if self.workers == 1:
            translations = [run(text) for text in texts]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                translations = list(executor.map(run, texts))

        records = []
        for group, translation in zip(groups, translations):
            translated = translation.split(ARTICLE_SEPARATOR)
            if len(translated) != len(group):
                logger.warning(
                    "Translation of %d articles came back as %d parts",
                    len(group),
                    len(translated),
                )
            for original, text in zip(group, translated):
                records.append(TranslationRecord(
                    original=original,
                    translation=text.strip(),
                    from_language=from_language,
                    to_language=to_language,
                ))
        return records


def _chunks(items: Iterable[str], size: int) -> Iterator[list[str]]:
    chunk: list[str] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def translate_dump(
    dump_path: Path | str,
    from_language: Language,
    to_language: Language,
    output: Path | str,
    translator: ApertiumTranslator,
    chunk_size: int = 10000,
    min_length: int = 100,
) -> int:
    """Translate every article of a dump and append records to output.

    Returns:
        Number of records written.
    """
    written = 0
    with open(output, "a", encoding="utf-8") as f:
        for chunk in _chunks(iter_articles(dump_path, min_length), chunk_size):
            logger.info(
                "Translating %d articles from %s to %s",
                len(chunk),
                from_language.code,
                to_language.code,
            )
            for record in translator.translate_articles(chunk, from_language, to_language):
                f.write(record.to_json() + "\n")
                written += 1
            f.flush()
    return written


def extract_corpus(
    nn_dump: Path | str,
    nb_dump: Path | str,
    output: Path | str,
    translator: ApertiumTranslator,
    chunk_size: int = 10000,
    min_length: int = 100,
) -> dict[str, int]:
    """Build a translation corpus from both dumps.

    The output file is recreated. Bokmål articles are translated first.

    Returns:
        Records written per source language code.
    """
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("", encoding="utf-8")

    counts = {}
    for dump, from_language, to_language in (
        (nb_dump, BOKMAAL, NYNORSK),
        (nn_dump, NYNORSK, BOKMAAL),
    ):
        counts[from_language.code] = translate_dump(
            dump,
            from_language,
            to_language,
            output,
            translator,
            chunk_size=chunk_size,
            min_length=min_length,
        )
    return counts
