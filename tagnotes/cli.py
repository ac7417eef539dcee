from __future__ import annotations
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from .codec import decode_notes, encode_notes
from .config import setup_logging
from .errors import CorruptStateError, PersistenceFailure
from .models import Draft, Note
from .store import NoteStore, open_store

app = typer.Typer(help="tagnotes — tagged notes from the terminal")
console = Console()


@app.callback()
def _boot(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG|INFO|WARNING|ERROR"),
):
    setup_logging(log_level)
    try:
        ctx.obj = open_store()
    except PersistenceFailure as e:
        console.print(f"[red]Storage unavailable[/]: {e}")
        raise typer.Exit(1)
    if ctx.obj.error:
        console.print(f"[yellow]Warning[/]: {ctx.obj.error}")


def _check_saved(store: NoteStore) -> None:
    if store.error:
        console.print(f"[red]Not written to disk[/]: {store.error}")
        raise typer.Exit(1)


def _require(store: NoteStore, note_id: int) -> Note:
    n = store.get(note_id)
    if not n:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)
    return n


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option("", "--title", "-t"),
    content: str = typer.Option("", "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="comma separated"),
):
    store: NoteStore = ctx.obj
    store.new_note()
    store.update_draft(title=title, content=content)
    store.commit_tag_input(tags or "")
    n = store.save_draft()
    if n is None:
        console.print("[yellow]Nothing to save[/]: title and content are both empty")
        raise typer.Exit(1)
    _check_saved(store)
    console.print(f"[green]Created[/] #{n.id}: {n.display_title}")


@app.command("list")
def _list(
    ctx: typer.Context,
    search: str = typer.Option("", "--search", "-s"),
    tag: str = typer.Option("", "--tag"),
):
    store: NoteStore = ctx.obj
    store.set_search(search)
    store.set_filter_tag(tag)
    notes = store.filtered_view()
    if not notes:
        msg = "No notes yet." if not store.notes else "No notes match your search."
        console.print(f"[dim]{msg}[/]")
        return
    table = Table(title="Notes")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("Created")
    for n in notes:
        table.add_row(
            str(n.id), n.display_title, ", ".join(n.tags),
            n.created_at.isoformat(timespec="minutes"),
        )
    console.print(table)


@app.command()
def tags(ctx: typer.Context):
    universe = ctx.obj.tag_universe()
    if not universe:
        console.print("[dim]no tags[/]")
        return
    console.print(", ".join(universe))


@app.command()
def show(ctx: typer.Context, note_id: int):
    n = _require(ctx.obj, note_id)
    console.rule(f"#{n.id} {n.display_title}")
    if n.tags:
        console.print(f"[dim]tags:[/] {', '.join(n.tags)}")
    console.print(n.content or "[dim]<empty>[/]", markup=not n.content)


@app.command()
def edit(
    ctx: typer.Context,
    note_id: int,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="replaces all tags"),
):
    store: NoteStore = ctx.obj
    _require(store, note_id)
    store.edit(note_id)
    if tags is not None:
        if tags.strip():
            store.commit_tag_input(tags)
        else:
            # blank input never commits, so clear explicitly
            for t in list(store.draft.tags):
                store.remove_tag(t)
    n = store.save_draft(title=title, content=content)
    if n is None:
        console.print("[yellow]Nothing to save[/]: title and content are both empty")
        raise typer.Exit(1)
    _check_saved(store)
    console.print(f"[green]Updated[/] #{n.id}: {n.display_title}")


@app.command()
def untag(ctx: typer.Context, note_id: int, tag: str):
    store: NoteStore = ctx.obj
    _require(store, note_id)
    store.edit(note_id)
    store.remove_tag(tag)
    n = store.save_draft()
    if n is None:
        console.print("[yellow]Nothing to save[/]: title and content are both empty")
        raise typer.Exit(1)
    _check_saved(store)
    console.print(f"[green]Updated[/] #{n.id}: {', '.join(n.tags) or 'no tags'}")


@app.command()
def delete(ctx: typer.Context, note_id: int):
    store: NoteStore = ctx.obj
    if not store.delete_note(note_id):
        console.print(f"[dim]No note #{note_id}; nothing deleted[/]")
        return
    _check_saved(store)
    console.print(f"[yellow]Deleted[/] #{note_id}")


@app.command()
def export(ctx: typer.Context, to: Path = typer.Option(..., "--to")):
    notes = ctx.obj.notes
    to.write_text(encode_notes(notes), encoding="utf-8")
    console.print(f"[green]Exported[/] {len(notes)} notes → {to}")


@app.command("import")
def import_(ctx: typer.Context, from_: Path = typer.Option(..., "--from")):
    store: NoteStore = ctx.obj
    try:
        data = decode_notes(from_.read_text(encoding="utf-8"))
    except CorruptStateError as e:
        console.print(f"[red]Cannot import[/] {from_}: {e}")
        raise typer.Exit(1)
    imported = 0
    for item in data:
        # imported records always get fresh ids
        if store.save_draft(Draft(title=item.title, content=item.content, tags=item.tags)):
            imported += 1
    _check_saved(store)
    console.print(f"[green]Imported[/] {imported} notes")


def main():
    app()

if __name__ == "__main__":
    main()
