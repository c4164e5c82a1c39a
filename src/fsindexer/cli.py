"""Command line interface for fsindexer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from fsindexer.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ES_PASSWORD,
    DEFAULT_ES_URL,
    DEFAULT_ES_USER,
    DEFAULT_EXCLUDE_DIR,
    DEFAULT_INCLUDE_FILE,
    DEFAULT_INDEX,
    IndexerConfig,
)
from fsindexer.errors import BackendError, ConfigurationError
from fsindexer.index.indexer import Indexer
from fsindexer.index.storage import ElasticsearchStore


console = Console()
app = typer.Typer(help="fsindexer - index a file system tree into Elasticsearch")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    if not verbose:
        logging.getLogger("elasticsearch").setLevel(logging.WARNING)
        logging.getLogger("elastic_transport").setLevel(logging.WARNING)


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main() -> None:
    """File system indexer."""


@app.command()
def index(
    source: Path = typer.Option(..., "--source", "-s", help="Folder or file to index recursively"),
    include_file: Optional[str] = typer.Option(
        DEFAULT_INCLUDE_FILE, "--include-file", help="Include file regular expression"
    ),
    exclude_file: Optional[str] = typer.Option(None, "--exclude-file", help="Exclude file regular expression"),
    include_dir: Optional[str] = typer.Option(None, "--include-dir", help="Include dir regular expression"),
    exclude_dir: Optional[str] = typer.Option(
        DEFAULT_EXCLUDE_DIR, "--exclude-dir", help="Exclude dir regular expression"
    ),
    include_path: Optional[str] = typer.Option(None, "--include-path", help="Include path regular expression"),
    exclude_path: Optional[str] = typer.Option(None, "--exclude-path", help="Exclude path regular expression"),
    es_url: str = typer.Option(DEFAULT_ES_URL, "--es-url", envvar="FSINDEXER_ES_URL", help="Elasticsearch URL"),
    es_user: str = typer.Option(DEFAULT_ES_USER, "--es-user", envvar="FSINDEXER_ES_USER", help="Elasticsearch user"),
    es_password: str = typer.Option(
        DEFAULT_ES_PASSWORD, "--es-password", envvar="FSINDEXER_ES_PASSWORD", help="Elasticsearch password"
    ),
    index_name: str = typer.Option(
        DEFAULT_INDEX, "--index", envvar="FSINDEXER_ES_INDEX", help="Name of the Elasticsearch index"
    ),
    chunk_size: int = typer.Option(
        DEFAULT_CHUNK_SIZE, "--chunk-size", help="Chunk size in characters, 0 or 1 disables chunking"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "--nop", help="Only traverse and classify, without indexing"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Walk SOURCE and publish the text of every admitted file."""
    _setup_logging(verbose)
    config = IndexerConfig(
        source=source,
        include_file=include_file,
        exclude_file=exclude_file,
        include_dir=include_dir,
        exclude_dir=exclude_dir,
        include_path=include_path,
        exclude_path=exclude_path,
        es_url=es_url,
        es_user=es_user,
        es_password=es_password,
        index_name=index_name,
        chunk_size=chunk_size,
        dry_run=dry_run,
    )

    try:
        filters = config.build_filters()
    except ConfigurationError as exc:
        _fail(exc.message)

    store = None
    if not config.dry_run:
        try:
            store = ElasticsearchStore(
                config.es_url,
                config.index_name,
                user=config.es_user,
                password=config.es_password,
            )
            store.ensure_index()
        except (BackendError, ConfigurationError) as exc:
            _fail(f"Cannot use index {config.index_name} at {config.es_url}: {exc.message}")

    indexer = Indexer(store, filters, chunk_size=config.chunk_size)
    label = "Walking" if config.dry_run else f"Indexing into [bold]{config.index_name}[/bold]"
    console.print(f"{label} {escape(str(config.source))}...")
    try:
        stats = indexer.index(config.source, dry_run=config.dry_run)
    except OSError as exc:
        _fail(f"Cannot read source {config.source}: {exc}")
    finally:
        if store is not None:
            store.close()

    if config.dry_run:
        console.print(f"Visited: {stats.visited}")
        return
    console.print(
        f"Indexed: {stats.indexed}, skipped: {stats.skipped}, "
        f"placeholders: {stats.placeholders}, failed: {stats.failed}, "
        f"chunks: {stats.chunks}, failed chunks: {stats.failed_chunks}"
    )
