"""samnorsk CLI - Bokmål/Nynorsk synonym extraction.

Usage:
    python -m samnorsk.main --trans translations.jsonl --output synonyms.txt
    python -m samnorsk.main --trans translations.jsonl --output synonyms.txt --reduction nn
    samnorsk-extract --trans translations.jsonl --cache-dir sources
"""

import argparse
import logging
import sys
from pathlib import Path

from .builder.synonyms import SynonymFilter, build_synonym_lines
from .builder.writer import write_synonyms
from .ingest import ALIGNERS, MappingReader, get_aligner
from .ingest.wikidump import ApertiumTranslator, WikiDumpSource, extract_corpus
from .schema import BOKMAAL, LANGUAGES, NYNORSK, get_language
from . import config as cfg

logger = logging.getLogger(__name__)


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="count", default=0, help="increase verbosity")
    parser.add_argument("--log-file", type=Path, default=None, help="write logs to this file")


def _configure_logging(args: argparse.Namespace) -> list[logging.Handler]:
    """Attach this run's handlers to the root logger and return them."""
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file, encoding="utf-8"))

    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return handlers


def _close_logging(handlers: list[logging.Handler]) -> None:
    root = logging.getLogger()
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the synonym mapper."""
    parser = argparse.ArgumentParser(
        prog="samnorsk-synonyms",
        description="Create Bokmål/Nynorsk search synonyms from a translation corpus",
    )
    parser.add_argument(
        "--trans",
        "-t",
        type=Path,
        required=True,
        help="Translation input file (JSON lines)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        required=True,
        help="Synonym output file (recreated)",
    )
    parser.add_argument(
        "--reduction",
        "-r",
        choices=sorted(LANGUAGES),
        default=None,
        help="Synonym reduction language (default: expansion synonyms)",
    )
    parser.add_argument(
        "--cutoff",
        type=int,
        default=cfg.default_cutoff(),
        help=f"Mappings must be seen more often than this (default: {cfg.default_cutoff()})",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=cfg.default_relative_threshold(),
        help=(
            "Fraction of the best mapping count a synonym must exceed "
            f"(default: {cfg.default_relative_threshold()})"
        ),
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=cfg.default_batch_size(),
        help=f"Records per counting batch (default: {cfg.default_batch_size()})",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=cfg.default_workers(),
        help="Counting processes, 0 = one per CPU (default: %(default)s)",
    )
    parser.add_argument(
        "--aligner",
        choices=sorted(ALIGNERS),
        default="token_discrepancy",
        help="Word aligner (default: %(default)s)",
    )
    _add_logging_arguments(parser)
    return parser


def run_synonyms(args: argparse.Namespace) -> int:
    """Run the synonym pipeline for parsed arguments."""
    expansion = args.reduction is None
    canonical = NYNORSK if expansion else get_language(args.reduction)

    print("=" * 60)
    print("samnorsk - Synonym Mapper")
    print("=" * 60)
    print(f"Input: {args.trans}")
    print(f"Mode: {'expansion' if expansion else f'reduction to {canonical.code}'}")
    print()

    synonym_filter = SynonymFilter(cutoff=args.cutoff, relative_threshold=args.threshold)
    reader = MappingReader(
        aligner=get_aligner(args.aligner)(),
        canonical_language=canonical,
        batch_size=args.batch_size,
        workers=args.workers,
    )

    print("[1/3] Counting word mappings...")
    table, read_stats = reader.frequencies(args.trans)
    print(f"  Records: {read_stats.total_records:,}")
    print(f"  Mappings: {read_stats.total_mappings:,} ({read_stats.distinct_mappings:,} distinct)")

    print("\n[2/3] Filtering synonyms...")
    lines = build_synonym_lines(synonym_filter.candidates(table))
    print(f"  Synonym lines: {len(lines):,}")

    print("\n[3/3] Writing synonyms...")
    stats = write_synonyms(lines, args.output, expansion=expansion)
    print(f"  Wrote {stats.lines:,} lines ({stats.synonyms:,} synonyms) to {stats.path}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    handlers = _configure_logging(args)

    try:
        return run_synonyms(args)
    except Exception as e:
        logger.error("Error: %s", e)
        logger.debug("Traceback", exc_info=True)
        return 1
    finally:
        _close_logging(handlers)


def build_extract_parser() -> argparse.ArgumentParser:
    """Argument parser for the corpus extractor."""
    defaults = cfg.load().get("defaults", cfg.FALLBACK_DEFAULTS)

    parser = argparse.ArgumentParser(
        prog="samnorsk-extract",
        description="Build a Bokmål/Nynorsk translation corpus from Wikipedia dumps",
    )
    parser.add_argument(
        "--trans",
        "-t",
        type=Path,
        required=True,
        help="Translation output file (recreated)",
    )
    parser.add_argument("--nndump", type=Path, help="Nynorsk dump (default: download latest)")
    parser.add_argument("--nbdump", type=Path, help="Bokmål dump (default: download latest)")
    parser.add_argument(
        "--cache-dir",
        "-c",
        type=Path,
        default=Path(cfg.default_cache_dir()),
        help="Cache directory for downloaded dumps (default: %(default)s)",
    )
    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force re-download of dumps",
    )
    parser.add_argument(
        "--apertium",
        default=defaults.get("apertium", cfg.FALLBACK_DEFAULTS["apertium"]),
        help="Apertium executable (default: %(default)s)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=1,
        help="Concurrent Apertium processes (default: %(default)s)",
    )
    _add_logging_arguments(parser)
    return parser


def run_extract(args: argparse.Namespace) -> int:
    """Resolve dumps and translate them into a corpus."""
    defaults = cfg.load().get("defaults", cfg.FALLBACK_DEFAULTS)

    nn_dump = WikiDumpSource(NYNORSK, args.cache_dir).resolve(args.nndump, force=args.force)
    nb_dump = WikiDumpSource(BOKMAAL, args.cache_dir).resolve(args.nbdump, force=args.force)
    print("Dumps resolved, starting translation")

    translator = ApertiumTranslator(
        command=args.apertium,
        group_size=defaults.get("translation_group_size", cfg.FALLBACK_DEFAULTS["translation_group_size"]),
        workers=args.workers,
    )
    counts = extract_corpus(
        nn_dump,
        nb_dump,
        args.trans,
        translator,
        chunk_size=defaults.get("translation_chunk_size", cfg.FALLBACK_DEFAULTS["translation_chunk_size"]),
        min_length=defaults.get("min_article_length", cfg.FALLBACK_DEFAULTS["min_article_length"]),
    )
    for code, count in counts.items():
        print(f"  {code}: {count:,} translated articles")
    return 0


def extract_main(argv: list[str] | None = None) -> int:
    """Corpus extraction entry point."""
    args = build_extract_parser().parse_args(argv)
    handlers = _configure_logging(args)

    try:
        return run_extract(args)
    except Exception as e:
        logger.error("Error: %s", e)
        logger.debug("Traceback", exc_info=True)
        return 1
    finally:
        _close_logging(handlers)


if __name__ == "__main__":
    sys.exit(main())
