"""Command line interface for docindex."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docindex.config import DEFAULT_INDEX_NAME, AppConfig
from docindex.errors import SnapshotError
from docindex.index.indexer import Indexer
from docindex.index.service import IndexService
from docindex.index.storage import open_store
from docindex.web.app import create_app


console = Console()
app = typer.Typer(help="docindex - local TF-IDF search over a document folder")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _check_folder(folder: Path) -> None:
    if not folder.is_dir():
        raise typer.BadParameter(f"Not a directory: {folder}")


def _display_path(path: str, folder: Path) -> str:
    try:
        return str(Path(path).relative_to(folder))
    except ValueError:
        return path


def _load_service(folder: Path, index_path: Path | None, *, read_only: bool = False) -> IndexService:
    """Restore the index stored for ``folder``; a corrupt snapshot aborts the command.

    With ``read_only`` a missing snapshot yields an empty index and nothing is
    created on disk.
    """
    config = AppConfig(index_path=index_path)
    resolved = config.resolve_index_path(folder)
    if read_only and not resolved.exists():
        return IndexService()
    try:
        return IndexService.from_store(open_store(resolved))
    except SnapshotError as exc:
        console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)


@app.command()
def serve(
    folder: Path = typer.Argument(..., help="Folder to index and search.", resolve_path=True),
    host: str = typer.Option(AppConfig().host, help="Host interface"),
    port: int = typer.Option(AppConfig().port, help="Server port"),
    index_path: Path = typer.Option(
        None, "--index", help=f"Snapshot file, relative to FOLDER (default {DEFAULT_INDEX_NAME})"
    ),
    lock_scope: str = typer.Option(
        AppConfig().lock_scope, help="Hold the index lock per 'file' or for the whole 'walk'"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index FOLDER in the background and start the web interface."""
    import uvicorn

    _setup_logging(verbose)
    _check_folder(folder)
    try:
        config = AppConfig(index_path=index_path, host=host, port=port, lock_scope=lock_scope)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    service = _load_service(folder, index_path)
    indexer = Indexer(service, lock_scope=config.lock_scope)

    crawler = threading.Thread(target=indexer.crawl, args=(folder,), name="docindex-crawl", daemon=True)
    crawler.start()

    console.print(f"Listening at http://{host}:{port}/ (index: {config.resolve_index_path(folder)})")
    uvicorn.run(
        create_app(service, config, indexer=indexer, root=folder),
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


@app.command()
def index(
    folder: Path = typer.Argument(..., help="Folder to index.", resolve_path=True),
    index_path: Path = typer.Option(None, "--index", help="Snapshot file, relative to FOLDER"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index FOLDER and save the snapshot without starting a server."""
    _setup_logging(verbose)
    _check_folder(folder)
    service = _load_service(folder, index_path)

    stats = Indexer(service).crawl(folder)
    console.print(
        f"Indexed: {stats.indexed}, unchanged: {stats.unchanged}, "
        f"unsupported: {stats.unsupported}, failed: {stats.failed}"
    )


@app.command()
def search(
    folder: Path = typer.Argument(..., help="Indexed folder.", resolve_path=True),
    query: str = typer.Argument(..., help="Query text"),
    index_path: Path = typer.Option(None, "--index", help="Snapshot file, relative to FOLDER"),
    top_k: int = typer.Option(AppConfig().result_limit, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rank the indexed documents of FOLDER against QUERY."""
    _setup_logging(verbose)
    _check_folder(folder)
    service = _load_service(folder, index_path, read_only=True)

    results = service.search(query, top_k=top_k)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Rank")
    table.add_column("Document")
    for result in results:
        table.add_row(f"{result.rank:.6f}", _display_path(result.path, folder))
    console.print(table)


@app.command()
def stats(
    folder: Path = typer.Argument(..., help="Indexed folder.", resolve_path=True),
    index_path: Path = typer.Option(None, "--index", help="Snapshot file, relative to FOLDER"),
) -> None:
    """Show document and term counts of the index."""
    _check_folder(folder)
    service = _load_service(folder, index_path, read_only=True)
    result = service.stats()
    console.print(f"Documents: {result.document_count}, terms: {result.term_count}")
