"""CLI entry point for keyscope."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.progress import Progress
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from keyscope.config import KeyscopeConfig, configure_logging, load_config
from keyscope.config.loader import DEFAULT_CONFIG_TEMPLATE
from keyscope.index import KeyIndex, Paginator, StaleCursorError, encode_key
from keyscope.navigation import NavigationController
from keyscope.store import DEFAULT_KEYSPACE, SQLiteStore, StoreError
from keyscope.store.seed import create_example_db
from keyscope.ui.formatting import decode_value, entry_label

app = typer.Typer(
    name="keyscope",
    help="Browse hierarchical keys in an ordered key-value store.",
)

config_app = typer.Typer(help="Manage keyscope configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: KeyscopeConfig | None = None


def _get_config() -> KeyscopeConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to keyscope.yaml")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="debug | info | warn | error")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
        if log_level is not None:
            _config = KeyscopeConfig.model_validate({**_config.model_dump(), "log_level": log_level})
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config)


def _open_store(db: str) -> SQLiteStore:
    try:
        return SQLiteStore(db)
    except StoreError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _resolve_delimiter(cfg: KeyscopeConfig, delimiter: str | None, flat: bool) -> str | None:
    """CLI flags win over config; ``--flat`` disables the hierarchy."""
    if flat:
        return None
    if delimiter is not None:
        if delimiter == "":
            rprint("[red]Error:[/red] --delimiter cannot be empty (use --flat)")
            raise typer.Exit(1)
        return delimiter
    return cfg.navigation.delimiter


def _resolve_keyspace(cfg: KeyscopeConfig, keyspace: str | None) -> str:
    return keyspace or cfg.navigation.default_keyspace or DEFAULT_KEYSPACE


def _split_path(path: str, delimiter: str | None) -> list[str]:
    """Turn ``a/b`` into cursor segments; an empty path is the root."""
    if not path:
        return []
    if delimiter is None:
        rprint("[red]Error:[/red] a PATH needs a delimiter (flat mode has no levels)")
        raise typer.Exit(1)
    return path.split(delimiter)


@app.command()
def trees(
    db: str = typer.Argument(..., help="Path to the database file"),
) -> None:
    """List keyspaces with their key counts."""
    store = _open_store(db)
    try:
        names = sorted(store.keyspaces())
        table = Table(title=f"Keyspaces ({len(names)})")
        table.add_column("Name", style="cyan")
        table.add_column("Keys", justify="right")
        for name in names:
            table.add_row(name, str(store.count(name)))
    except StoreError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()
    rprint(table)


@app.command("ls")
def list_keys(
    db: str = typer.Argument(..., help="Path to the database file"),
    path: str = typer.Argument("", help="Hierarchy path, e.g. a/b"),
    keyspace: Annotated[str | None, typer.Option("--keyspace", "-k", help="Keyspace name")] = None,
    delimiter: Annotated[
        str | None, typer.Option("--delimiter", "-d", help="Key segment delimiter")
    ] = None,
    flat: Annotated[bool, typer.Option("--flat", help="Ignore the hierarchy")] = False,
    offset: Annotated[int, typer.Option("--offset", min=0, help="First entry to show")] = 0,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", min=1, help="Entries to show")
    ] = None,
) -> None:
    """Show one window of entries at PATH."""
    cfg = _get_config()
    delim = _resolve_delimiter(cfg, delimiter, flat)
    name = _resolve_keyspace(cfg, keyspace)
    cursor = _split_path(path, delim)
    count = limit or cfg.navigation.page_size

    store = _open_store(db)
    try:
        index = KeyIndex.build(store, name, delim, cfg.navigation.encoding)
        window = Paginator(index, store).get_window(cursor, offset, count)
    except StaleCursorError:
        rprint(f"[red]Error:[/red] path not found: {path}")
        raise typer.Exit(1)
    except StoreError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()

    if not window.entries:
        rprint(f"[yellow]No keys at {name}:{path or '/'}[/yellow] ({window.total} total)")
        return

    first = window.offset + 1
    last = window.offset + len(window.entries)
    table = Table(title=f"{name}:{path or '/'} ({first}-{last} of {window.total})")
    table.add_column("Key", style="cyan")
    table.add_column("Kind")
    for entry in window.entries:
        if entry.has_children and entry.has_value:
            kind = "dir+value"
        elif entry.has_children:
            kind = "dir"
        else:
            kind = "value"
        table.add_row(Text(entry_label(entry)), kind)
    rprint(table)
    if index.decode_failures:
        rprint(f"[yellow]{len(index.decode_failures)} undecodable key(s) skipped[/yellow]")


@app.command()
def get(
    db: str = typer.Argument(..., help="Path to the database file"),
    key: str = typer.Argument(..., help="Fully-qualified key"),
    keyspace: Annotated[str | None, typer.Option("--keyspace", "-k", help="Keyspace name")] = None,
    raw: Annotated[bool, typer.Option("--raw", help="Write the bytes unmodified")] = False,
) -> None:
    """Print the value bound to KEY."""
    cfg = _get_config()
    name = _resolve_keyspace(cfg, keyspace)
    store = _open_store(db)
    try:
        store.open_keyspace(name)
        value = store.get(name, encode_key(key, cfg.navigation.encoding))
    except StoreError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()

    if value is None:
        rprint(f"[yellow]No value bound to[/yellow] {key}")
        raise typer.Exit(1)
    if raw:
        typer.echo(value, nl=False)
        return
    text = decode_value(value, cfg.display.value_encoding, cfg.display.pretty_print)
    rprint(Text(text))


@app.command()
def browse(
    db: str = typer.Argument(..., help="Path to the database file"),
    keyspace: Annotated[
        str | None, typer.Option("--keyspace", "-k", help="Open this keyspace directly")
    ] = None,
    delimiter: Annotated[
        str | None, typer.Option("--delimiter", "-d", help="Key segment delimiter")
    ] = None,
    flat: Annotated[bool, typer.Option("--flat", help="Ignore the hierarchy")] = False,
) -> None:
    """Browse the database interactively."""
    from keyscope.ui.app import KeyscopeApp

    cfg = _get_config()
    delim = _resolve_delimiter(cfg, delimiter, flat)
    store = _open_store(db)
    try:
        controller = NavigationController(store, delim, cfg.navigation.encoding)
        tui = KeyscopeApp(
            controller,
            cfg,
            title=Path(db).name,
            keyspace=keyspace or cfg.navigation.default_keyspace,
        )
        tui.run()
    finally:
        store.close()


@app.command()
def seed(
    db: str = typer.Argument(..., help="Path of the database to create"),
    keys: Annotated[
        int | None, typer.Option("--keys", min=1, help="Keys per hierarchy level")
    ] = None,
) -> None:
    """Create an example database with one keyspace per delimiter."""
    cfg = _get_config()
    per_level = keys or cfg.seed.keys_per_level
    delimiters = cfg.seed.delimiters
    total = per_level**3 * len(delimiters)

    try:
        with Progress() as progress:
            task = progress.add_task("Creating database entries...", total=total)
            written = create_example_db(
                db,
                keys_per_level=per_level,
                delimiters=delimiters,
                on_progress=lambda n: progress.advance(task, n),
            )
    except (FileExistsError, ValueError, StoreError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    rprint(f"[green]Created[/green] example database at {db} ({written} keys)")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default keyscope.yaml in current directory."""
    target = Path("keyscope.yaml")
    if target.exists() and not force:
        rprint("[yellow]keyscope.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
