# src/blockpress/cli.py
"""
Blockpress Command Line Interface (CLI).

Works on files holding stored block content (canonical block array, legacy
plain text or empty) using ``typer`` for arguments and ``rich`` for output.

Commands
--------
- ``inspect``: table of the blocks in a file, corrupt blocks flagged.
- ``normalize``: rewrite content in the canonical encoding.
- ``render``: HTML, Markdown or a node tree.
- ``descriptors``: structured-data descriptors, optionally as JSON-LD.
- ``attach``: upload a file into an image or gallery block.

Usage
-----
    $ blockpress inspect post.json
    $ blockpress render post.json --format markdown
    $ blockpress descriptors post.json --json-ld
    $ blockpress attach post.json b3 photo.png
"""

from __future__ import annotations

import asyncio
import json
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from blockpress.core.codec import is_block_array, parse, serialize
from blockpress.core.contracts.block import AnyBlock, CorruptBlock, Document
from blockpress.core.contracts.presentation import RenderNode
from blockpress.core.ids import make_ids
from blockpress.core.settings import load_settings
from blockpress.editor.session import EditSession
from blockpress.editor.uploads import upload_into
from blockpress.render import render, render_html, render_markdown
from blockpress.seo import derive_descriptors, descriptors_to_json, to_json_ld
from blockpress.uploads import LocalUploadStore, UploadAsset

# Settings such as BLOCKPRESS_UPLOAD_DIR may live in a local .env file
load_dotenv()

app = typer.Typer(
    help="Blockpress: inspect, normalize, render and publish block content.",
    rich_markup_mode="markdown",
)
console = Console()

ContentFile = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="File holding stored content (block array, legacy text or empty).",
    ),
]


class OutputFormat(str, Enum):
    html = "html"
    markdown = "markdown"
    tree = "tree"


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[bold red]❌ Could not read {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        console.print(f"[bold red]❌ Could not write {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _load(path: Path) -> tuple[str, Document]:
    stored = _read(path)
    return stored, parse(stored, ids=make_ids(load_settings().id_style))


def _summary(block: AnyBlock, width: int = 60) -> str:
    if isinstance(block, CorruptBlock):
        text = json.dumps(block.raw, ensure_ascii=False)
    elif isinstance(block.content, str):
        text = block.content
    else:
        text = block.content.model_dump_json(by_alias=True)
    return text if len(text) <= width else text[: width - 1] + "…"


def _tree(node: RenderNode, parent: Tree | None = None) -> Tree:
    label = Text(node.tag, style="bold")
    if node.key:
        label.append(f" #{node.key}", style="dim")
    if node.text:
        label.append(f": {node.text}")
    branch = Tree(label) if parent is None else parent.add(label)
    for child in node.children:
        _tree(child, branch)
    return branch


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def inspect(file: ContentFile) -> None:
    """Show the blocks stored in FILE."""
    stored, doc = _load(file)
    shape = "block array" if is_block_array(stored) else ("empty" if not stored else "legacy text")

    table = Table(title=f"{file.name} ({shape})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("id", style="cyan")
    table.add_column("type", style="magenta")
    table.add_column("content")
    for i, block in enumerate(doc):
        kind = block.type or "?"
        if isinstance(block, CorruptBlock):
            kind = f"[red]{kind} (corrupt)[/red]"
        table.add_row(str(i + 1), Text(block.id), kind, Text(_summary(block)))
    console.print(table)

    corrupt = sum(1 for b in doc if isinstance(b, CorruptBlock))
    if corrupt:
        console.print(f"[yellow]⚠️ {corrupt} corrupt block(s) kept verbatim[/yellow]")


@app.command()  # type: ignore[misc]
def normalize(
    file: ContentFile,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write here instead of standard output."),
    ] = None,
    in_place: Annotated[
        bool,
        typer.Option("--in-place", "-i", help="Rewrite FILE itself."),
    ] = False,
) -> None:
    """Re-encode FILE in the canonical block-array form."""
    _, doc = _load(file)
    canonical = serialize(doc)
    target = file if in_place else output
    if target is None:
        typer.echo(canonical)
        return
    _write(target, canonical)
    console.print(f"[green]✅ Wrote {len(doc)} block(s) to {target}[/green]")


@app.command(name="render")  # type: ignore[misc]
def render_cmd(
    file: ContentFile,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.html,
) -> None:
    """Render FILE as HTML, Markdown or a node tree."""
    _, doc = _load(file)
    if fmt is OutputFormat.html:
        typer.echo(render_html(doc))
    elif fmt is OutputFormat.markdown:
        typer.echo(render_markdown(doc))
    else:
        console.print(_tree(render(doc)))


@app.command()  # type: ignore[misc]
def descriptors(
    file: ContentFile,
    json_ld: Annotated[
        bool,
        typer.Option("--json-ld", help="Emit schema.org JSON-LD objects."),
    ] = False,
    upload_date: Annotated[
        str | None,
        typer.Option("--upload-date", help="ISO date attached to video objects (JSON-LD only)."),
    ] = None,
) -> None:
    """Print the structured-data descriptors derived from FILE."""
    _, doc = _load(file)
    found = derive_descriptors(doc)
    if json_ld:
        typer.echo(json.dumps(to_json_ld(found, upload_date=upload_date), ensure_ascii=False, indent=2))
    else:
        typer.echo(descriptors_to_json(found))


@app.command()  # type: ignore[misc]
def attach(
    file: ContentFile,
    block_id: Annotated[str, typer.Argument(help="Target image or gallery block id.")],
    asset: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True, help="File to upload."),
    ],
    item: Annotated[
        int | None,
        typer.Option("--item", help="Gallery item index to receive the URL."),
    ] = None,
    upload_dir: Annotated[
        Path | None,
        typer.Option("--upload-dir", help="Override BLOCKPRESS_UPLOAD_DIR."),
    ] = None,
) -> None:
    """Upload ASSET and store its URL in block BLOCK_ID of FILE."""
    stored = _read(file)
    session = EditSession.from_stored(stored)
    try:
        data = asset.read_bytes()
    except OSError as e:
        console.print(f"[bold red]❌ Could not read {asset}:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    upload = UploadAsset(
        filename=asset.name,
        data=data,
        content_type=mimetypes.guess_type(asset.name)[0] or "application/octet-stream",
    )
    store = LocalUploadStore(upload_dir)
    result = asyncio.run(upload_into(session, block_id, upload, store, item_index=item))
    if result.is_err():
        console.print(f"[bold red]❌ Upload failed:[/bold red] {result.unwrap_err().message}")
        raise typer.Exit(code=1)

    uploaded = result.unwrap()
    if session.revision == 0:
        console.print(f"[yellow]⚠️ Stored {uploaded.url} but block {block_id!r} did not take it[/yellow]")
        raise typer.Exit(code=1)

    _write(file, session.stored)
    console.print(
        Panel(
            f"{asset.name} → [link={uploaded.url}]{uploaded.url}[/link]",
            title=f"Attached to {block_id}",
            border_style="green",
        )
    )


if __name__ == "__main__":
    app()
