# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from ..adapters.filesystem.local_fs import LocalFS
from ..config import Settings, load_settings
from ..domain import ConfigurationError, ExclusionSet, LogsiftError, resolve_folder_name
from ..logging_config import set_verbose, setup_logging
from ..services import (
    FolderSearchService,
    LogCountService,
    LogManagementService,
    LogSearchService,
    VolumeScanner,
)

setup_logging()

app = typer.Typer(help="Logsift CLI - locate, count and manage log folders across volumes")

logger = logging.getLogger(__name__)


# ------------------------------
# Composition root
# ------------------------------


@dataclass
class Wiring:
    settings: Settings
    exclusions: ExclusionSet
    scanner: VolumeScanner
    counts: LogCountService
    management: LogManagementService
    search: LogSearchService


def _wire(
    config: Optional[Path] = None,
    roots: Optional[List[Path]] = None,
    exclude: Optional[List[str]] = None,
    max_concurrency: Optional[int] = None,
) -> Wiring:
    """
    Minimal composition root:
      Settings + LocalFS + FolderSearchService + VolumeScanner + glue services
    """
    settings = load_settings(config)
    if max_concurrency is not None and max_concurrency < 1:
        raise typer.BadParameter("--max-concurrency must be an integer >= 1")

    exclusions = settings.exclusions.union(exclude or [])
    fs = LocalFS(
        volume_roots=roots or settings.volume_roots or None,
        skip_hidden=settings.skip_hidden,
    )
    search = FolderSearchService(
        fs, max_concurrency=max_concurrency or settings.max_concurrency
    )
    scanner = VolumeScanner(search)
    return Wiring(
        settings=settings,
        exclusions=exclusions,
        scanner=scanner,
        counts=LogCountService(scanner, exclusions),
        management=LogManagementService(scanner, exclusions),
        search=LogSearchService(fs),
    )


@contextlib.contextmanager
def _errors_to_exit() -> Iterator[None]:
    try:
        yield
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    except LogsiftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def _verbose(verbose: bool) -> None:
    if verbose:
        set_verbose()


FOLDER_OPT = typer.Option(
    ..., "--folder", help="Log folder: AmadeoLogs, AWIErrors, Loggings or any directory name"
)
ROOT_OPT = typer.Option(
    None,
    "--root",
    help="Search this root instead of mounted volumes (repeatable)",
    resolve_path=True,
)
EXCLUDE_OPT = typer.Option(
    None, "--exclude", help="Extra path fragment to skip (repeatable, case-insensitive)"
)
CONFIG_OPT = typer.Option(
    None, "--config", help="TOML settings file ([logsift] table)", exists=True, dir_okay=False
)
CONCURRENCY_OPT = typer.Option(
    None, "--max-concurrency", help="Cap on concurrent filesystem calls. Omit for unbounded."
)
VERBOSE_OPT = typer.Option(False, "--verbose", help="Enable verbose logging")
START_OPT = typer.Option(..., "--start", help="Start of the period, e.g. 2025-01-15T14:30:00")
END_OPT = typer.Option(..., "--end", help="End of the period, e.g. 2025-01-15T14:30:00")


# ------------------------------
# CLI Commands
# ------------------------------


@app.command()
def locate(
    folder: str = FOLDER_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    max_concurrency: Optional[int] = CONCURRENCY_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Print the first directory named FOLDER found on any volume.
    """
    _verbose(verbose)
    with _errors_to_exit():
        w = _wire(config, root, exclude, max_concurrency)
        target = resolve_folder_name(folder)
        found = asyncio.run(w.scanner.locate_across_volumes(target, w.exclusions))

    if found is None:
        typer.echo(f"Directory {target!r} not found")
        raise typer.Exit(code=1)
    typer.echo(str(found))


@app.command("count-total")
def count_total(
    folder: str = FOLDER_OPT,
    start: Optional[datetime] = typer.Option(None, "--start", help="Start of the period"),
    end: Optional[datetime] = typer.Option(None, "--end", help="End of the period"),
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    max_concurrency: Optional[int] = CONCURRENCY_OPT,
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = VERBOSE_OPT,
):
    """
    Count files created within the period in every directory named FOLDER.
    """
    _verbose(verbose)
    with _errors_to_exit():
        w = _wire(config, root, exclude, max_concurrency)
        report = w.counts.count_total_logs(folder, start, end)

    if as_json:
        typer.echo(json.dumps(report.as_dict(), ensure_ascii=False))
        return
    typer.echo(report.message)
    if report.full_path is not None:
        typer.echo(f"Folder: {report.full_path}")


@app.command("count-unique")
def count_unique(
    folder: str = FOLDER_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    max_concurrency: Optional[int] = CONCURRENCY_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Count distinct lines across the files in FOLDER.
    """
    _verbose(verbose)
    with _errors_to_exit():
        count = _wire(config, root, exclude, max_concurrency).counts.count_unique_errors(folder)
    typer.echo(f"Unique errors: {count}")


@app.command("count-duplicated")
def count_duplicated(
    folder: str = FOLDER_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    max_concurrency: Optional[int] = CONCURRENCY_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Count repeated lines across the files in FOLDER.
    """
    _verbose(verbose)
    with _errors_to_exit():
        count = _wire(config, root, exclude, max_concurrency).counts.count_duplicated_errors(folder)
    typer.echo(f"Duplicated errors: {count}")


@app.command()
def delete(
    folder: str = FOLDER_OPT,
    start: datetime = START_OPT,
    end: datetime = END_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Delete files in FOLDER last written within the period.
    """
    _verbose(verbose)
    with _errors_to_exit():
        deleted = _wire(config, root, exclude).management.delete_logs_by_period(
            folder, start, end
        )
    typer.echo(f"Deleted {len(deleted)} files")


@app.command()
def archive(
    folder: str = FOLDER_OPT,
    start: datetime = START_OPT,
    end: datetime = END_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Move files in FOLDER last written within the period into a dated zip archive.
    """
    _verbose(verbose)
    with _errors_to_exit():
        written = _wire(config, root, exclude).management.archive_logs_by_period(
            folder, start, end
        )
    if written is None:
        typer.echo("Nothing archived")
        return
    typer.echo(f"Wrote archive {written}")


@app.command("delete-archived")
def delete_archived(
    folder: str = FOLDER_OPT,
    start: datetime = START_OPT,
    end: datetime = END_OPT,
    root: Optional[List[Path]] = ROOT_OPT,
    exclude: Optional[List[str]] = EXCLUDE_OPT,
    config: Optional[Path] = CONFIG_OPT,
    verbose: bool = VERBOSE_OPT,
):
    """
    Delete the dated zip archive for the period from FOLDER.
    """
    _verbose(verbose)
    with _errors_to_exit():
        removed = _wire(config, root, exclude).management.delete_archived_logs_by_period(
            folder, start, end
        )
    typer.echo("Archive deleted" if removed else "Archive not found")


@app.command()
def search(
    path: Path = typer.Option(
        ...,
        "--path",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        help="Directory to search",
    ),
    pattern: str = typer.Option("*", "--pattern", help="Glob pattern, e.g. '*.log'"),
    recursive: bool = typer.Option(
        False, "--recursive", help="Include subdirectories"
    ),
):
    """
    List files matching a pattern in a directory.
    """
    for p in LogSearchService(LocalFS()).search_in_directories(path, pattern, recursive):
        typer.echo(str(p))


@app.command("search-size")
def search_size(
    path: Path = typer.Option(
        ..., "--path", exists=True, file_okay=False, resolve_path=True, help="Directory to search"
    ),
    min_kb: int = typer.Option(0, "--min-kb", min=0, help="Minimum size in KB (inclusive)"),
    max_kb: int = typer.Option(..., "--max-kb", min=0, help="Maximum size in KB (inclusive)"),
):
    """
    List files in a directory whose size in KB lies within [min-kb, max-kb].
    """
    if min_kb > max_kb:
        raise typer.BadParameter("--min-kb must not exceed --max-kb")
    for p in LogSearchService(LocalFS()).search_by_size(path, min_kb, max_kb):
        typer.echo(str(p))


@app.command("search-dir")
def search_dir(
    path: Path = typer.Option(
        ..., "--path", exists=True, file_okay=False, resolve_path=True, help="Directory to list"
    ),
):
    """
    List the files directly inside a directory.
    """
    for p in LogSearchService(LocalFS()).search_by_directory(path):
        typer.echo(str(p))


@app.command("grant-access")
def grant_access(
    path: Optional[Path] = typer.Option(
        None, "--path", help="Folder to open up; defaults to permission_path from the config"
    ),
    config: Optional[Path] = CONFIG_OPT,
):
    """
    Give everyone full access to a folder.
    """
    with _errors_to_exit():
        w = _wire(config)
    target = path or w.settings.permission_path
    if target is None:
        raise typer.BadParameter("no --path given and no permission_path configured")
    if not w.management.grant_full_access(target):
        typer.echo(f"Could not grant access to {target}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Granted full access to {target}")
