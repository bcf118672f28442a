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

from pathlib import Path
from typing import Optional
import logging

import typer

from ..adapters.filesystem.local_fs import LocalFS
from ..adapters.hashing.md5_hasher import MD5Hasher
from ..adapters.store.gzip_json_store import GzipJSONStore
from ..adapters.store.json_codec import format_timestamp
from ..domain.errors import DupIndexError
from ..domain.index import ContentIndex
from ..services import IndexService, ReportService, WalkService
from ..services.walk_service import DEFAULT_PROGRESS_EVERY

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(help="dupindex CLI - content-addressed file index and duplicate lookup")

DEFAULT_CACHE = "dupindex.json.gz"

logger = logging.getLogger(__name__)


# ------------------------------
# Composition root
# ------------------------------


def _wire(progress_every: int = DEFAULT_PROGRESS_EVERY) -> tuple[WalkService, IndexService, GzipJSONStore]:
    """
    Minimal composition root:
      LocalFS + MD5Hasher + GzipJSONStore
    """
    fs = LocalFS()
    walker = WalkService(fs, progress_every=progress_every)
    indexer = IndexService(fs, MD5Hasher())
    store = GzipJSONStore()
    return walker, indexer, store


def run_scan(root: Path, out: Path, progress_every: int = DEFAULT_PROGRESS_EVERY) -> ContentIndex:
    """
    Walk `root`, index every file by content and persist the result to `out`.
    Any DupIndexError propagates; the caller decides whether to exit.
    """
    walker, indexer, store = _wire(progress_every)
    index = indexer.build(walker.walk(root))
    store.write(index, out)
    return index


def _fail(exc: DupIndexError) -> typer.Exit:
    logger.debug("Aborting run", exc_info=exc)
    typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
    return typer.Exit(code=1)


# ------------------------------
# CLI Commands
# ------------------------------


@app.command()
def scan(
    path: Path = typer.Option(
        ...,
        "--path",
        exists=True,
        resolve_path=True,
        help="Directory to scan",
    ),
    out: Path = typer.Option(
        DEFAULT_CACHE,
        "--out",
        help="Where to write the compressed index",
        resolve_path=True,
    ),
    progress: int = typer.Option(
        DEFAULT_PROGRESS_EVERY,
        "--progress",
        min=0,
        help="Log a progress line every N files. 0 disables it.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress the final summary line.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Scan a directory, hash every file and write the grouped index.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    try:
        index = run_scan(path, out, progress_every=progress)
    except DupIndexError as e:
        raise _fail(e)

    if not quiet:
        typer.echo(
            f"Scanned {path}; indexed {index.record_count()} files under {len(index)} keys; index: {out}"
        )


@app.command()
def info(
    cache: Path = typer.Option(
        DEFAULT_CACHE,
        "--cache",
        help="Path to a compressed index written by `scan`.",
        resolve_path=True,
    ),
):
    """
    Show the provenance and size of a stored index.
    """
    try:
        header, index = GzipJSONStore().read_with_provenance(cache)
    except DupIndexError as e:
        raise _fail(e)

    typer.echo(f"Name: {header.name}")
    typer.echo(f"Comment: {header.comment}")
    typer.echo(f"ModTime: {format_timestamp(header.mtime) if header.mtime else 'unset'}")
    typer.echo(f"Keys: {len(index)}")
    typer.echo(f"Files: {index.record_count()}")
    typer.echo(f"Duplicate groups: {sum(1 for _ in index.duplicates())}")


@app.command()
def report(
    cache: Path = typer.Option(
        DEFAULT_CACHE,
        "--cache",
        help="Path to a compressed index written by `scan`.",
        resolve_path=True,
    ),
    fmt: str = typer.Option(
        "json",
        "--fmt",
        help="Output format: json, ndjson or csv.",
        case_sensitive=False,
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "--output",
        help="Write report to this path. If a directory is provided, the file will be named 'duplicates.<fmt>' inside it. "
        "If omitted entirely, defaults to './duplicates.<fmt>'.",
        resolve_path=True,
    ),
):
    """
    Generate a duplicate report from a stored index.
    """
    try:
        index = GzipJSONStore().read(cache)
    except DupIndexError as e:
        raise _fail(e)

    # Target path:
    # - no --out  -> ./duplicates.<fmt>
    # - --out DIR -> DIR/duplicates.<fmt>
    # - --out FILE -> FILE
    if out is None:
        target = Path(f"duplicates.{fmt}")
    elif out.is_dir():
        target = out / f"duplicates.{fmt}"
    else:
        target = out

    try:
        written = ReportService(index).write_duplicates(target, fmt=fmt)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--fmt")
    typer.echo(f"Wrote {fmt} report to {written}")
