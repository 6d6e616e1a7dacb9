"""CLI interface for the qulome content store."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from qulome.backup import export_data, import_data, parse_markdown_file, read_backup, write_backup
from qulome.config import load_config, merge_cli_overrides
from qulome.content.models import ColorMode
from qulome.errors import NotFoundError, ValidationError
from qulome.studio import Studio
from qulome.themes.services import RootStyleScope

app = typer.Typer(
    name="qulome",
    help="Manage Qulome drafts, themes, icons and published articles.",
    no_args_is_help=True,
)
drafts_app = typer.Typer(help="Work with drafts.", no_args_is_help=True)
themes_app = typer.Typer(help="Work with themes.", no_args_is_help=True)
icons_app = typer.Typer(help="Work with icons.", no_args_is_help=True)
publish_app = typer.Typer(help="Publish drafts and manage published articles.", no_args_is_help=True)
backup_app = typer.Typer(help="Export and import backups.", no_args_is_help=True)
app.add_typer(drafts_app, name="drafts")
app.add_typer(themes_app, name="themes")
app.add_typer(icons_app, name="icons")
app.add_typer(publish_app, name="publish")
app.add_typer(backup_app, name="backup")

console = Console()


class _State:
    data_dir: Optional[Path] = None
    config_path: Optional[Path] = None


_state = _State()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from qulome import __version__

        console.print(f"qulome {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    data_dir: Annotated[
        Optional[Path],
        typer.Option("--data-dir", "-d", help="Directory holding the store file."),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .qulome.toml file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Qulome - the content store behind the article studio."""
    _state.data_dir = data_dir
    _state.config_path = config
    cfg = load_config(config)
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _open_studio() -> Studio:
    config = merge_cli_overrides(
        load_config(_state.config_path),
        data_dir=str(_state.data_dir) if _state.data_dir else None,
    )
    return Studio.open(config)


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    raise typer.Exit(1)


# ── drafts ───────────────────────────────────────────────────────


@drafts_app.command("list")
def drafts_list() -> None:
    """List drafts, marking the current one."""
    studio = _open_studio()
    current = studio.drafts.get_current_draft_id()
    table = Table(title="Drafts")
    table.add_column("")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Updated")
    for draft in studio.drafts.get_drafts():
        marker = "*" if draft.id == current else ""
        table.add_row(marker, draft.id, draft.title, draft.updated_at.isoformat(timespec="seconds"))
    console.print(table)


@drafts_app.command("new")
def drafts_new(
    content: Annotated[str, typer.Argument(help="Draft markup.")] = "",
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Read the markup from a file."),
    ] = None,
) -> None:
    """Create a draft and make it current."""
    studio = _open_studio()
    if file is not None:
        try:
            content = file.read_text(encoding="utf-8")
        except OSError as exc:
            _fail(exc)
    draft = studio.drafts.create_draft(content)
    studio.drafts.set_current_draft_id(draft.id)
    console.print(f"Created [bold]{draft.id}[/bold]: {draft.title}")


@drafts_app.command("show")
def drafts_show(draft_id: str) -> None:
    """Print a draft's markup."""
    draft = _open_studio().drafts.get_draft(draft_id)
    if draft is None:
        _fail(NotFoundError("Draft", draft_id))
    console.print(f"[bold]{draft.title}[/bold]")
    console.print(draft.content, markup=False)


@drafts_app.command("delete")
def drafts_delete(draft_id: str) -> None:
    """Delete a draft."""
    studio = _open_studio()
    if studio.drafts.delete_draft(draft_id):
        console.print(f"Deleted {draft_id}")
    else:
        console.print(f"[yellow]No draft {draft_id}[/yellow]")


@drafts_app.command("clean")
def drafts_clean() -> None:
    """Remove drafts without any text."""
    removed = _open_studio().drafts.clean_orphan_drafts()
    console.print(f"Removed {removed} orphan drafts")


# ── themes ───────────────────────────────────────────────────────


@themes_app.command("list")
def themes_list() -> None:
    """List themes, marking the active one."""
    studio = _open_studio()
    active = studio.themes.get_active_theme()
    table = Table(title="Themes")
    table.add_column("")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("System")
    for theme in studio.themes.get_themes():
        marker = "*" if active and theme.id == active.id else ""
        table.add_row(marker, theme.id, theme.name, "yes" if theme.is_system_theme else "")
    console.print(table)


@themes_app.command("add")
def themes_add(name: str) -> None:
    """Create a theme with the default styles."""
    try:
        theme = _open_studio().themes.add_theme(name)
    except ValidationError as exc:
        _fail(exc)
    console.print(f"Added [bold]{theme.id}[/bold]: {theme.name}")


@themes_app.command("apply")
def themes_apply(theme_id: str) -> None:
    """Make a theme active."""
    try:
        theme = _open_studio().themes.apply_theme(theme_id)
    except NotFoundError as exc:
        _fail(exc)
    console.print(f"Active theme: {theme.name}")


@themes_app.command("delete")
def themes_delete(theme_id: str) -> None:
    """Delete a user theme."""
    try:
        deleted = _open_studio().themes.delete_theme(theme_id)
    except ValidationError as exc:
        _fail(exc)
    if deleted:
        console.print(f"Deleted {theme_id}")
    else:
        console.print(f"[yellow]No theme {theme_id}[/yellow]")


@themes_app.command("css")
def themes_css(
    theme_id: Annotated[Optional[str], typer.Argument(help="Theme to render; defaults to active.")] = None,
) -> None:
    """Print a theme's style variables as a :root CSS rule."""
    studio = _open_studio()
    theme = studio.themes.get_theme(theme_id) if theme_id else studio.themes.get_active_theme()
    if theme is None:
        _fail(NotFoundError("Theme", theme_id))
    scope = RootStyleScope()
    for name, value in theme.styles.items():
        scope.set_property(name, value)
    console.print(scope.to_css(), markup=False, highlight=False)


# ── icons ────────────────────────────────────────────────────────


@icons_app.command("list")
def icons_list() -> None:
    """List icons."""
    table = Table(title="Icons")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Mode")
    for icon in _open_studio().icons.get_icons():
        table.add_row(icon.id, icon.name, icon.color or "", icon.color_mode.value)
    console.print(table)


@icons_app.command("add")
def icons_add(
    name: str,
    svg_file: Annotated[Path, typer.Argument(help="File containing the SVG markup.")],
) -> None:
    """Add an icon from an SVG file."""
    try:
        icon = _open_studio().icons.add_icon(name, svg_file.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        _fail(exc)
    console.print(f"Added [bold]{icon.id}[/bold]: {icon.name}")


@icons_app.command("color")
def icons_color(
    icon_id: str,
    color: str,
    mode: Annotated[ColorMode, typer.Option("--mode", "-m", help="Recolor mode.")] = ColorMode.MAIN,
) -> None:
    """Recolor an icon."""
    icon = _open_studio().icons.update_icon_color(icon_id, color, mode)
    if icon is None:
        _fail(NotFoundError("Icon", icon_id))
    console.print(icon.svg, markup=False, highlight=False)


@icons_app.command("delete")
def icons_delete(icon_id: str) -> None:
    """Delete an icon."""
    if _open_studio().icons.delete_icon(icon_id):
        console.print(f"Deleted {icon_id}")
    else:
        console.print(f"[yellow]No icon {icon_id}[/yellow]")


# ── publish ──────────────────────────────────────────────────────


@publish_app.command("draft")
def publish_draft(draft_id: str) -> None:
    """Publish a draft with the active theme."""
    try:
        article = _open_studio().publish_draft(draft_id)
    except NotFoundError as exc:
        _fail(exc)
    console.print(f"Published [bold]{article.id}[/bold]: {article.title}")


@publish_app.command("list")
def publish_list() -> None:
    """List published articles."""
    table = Table(title="Published")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Published")
    table.add_column("Theme")
    for article in _open_studio().published.get_published():
        table.add_row(
            article.id,
            article.title,
            article.published_at.isoformat(timespec="seconds"),
            article.theme_id or "",
        )
    console.print(table)


@publish_app.command("delete")
def publish_delete(article_id: str) -> None:
    """Delete a published article."""
    if _open_studio().published.delete_published(article_id):
        console.print(f"Deleted {article_id}")
    else:
        console.print(f"[yellow]No published article {article_id}[/yellow]")


# ── backup / repair ──────────────────────────────────────────────


@backup_app.command("export")
def backup_export(output: Annotated[Path, typer.Argument(help="Backup file to write.")]) -> None:
    """Write every collection to a JSON backup."""
    path = write_backup(export_data(_open_studio()), output)
    console.print(f"Backup written to {path}")


@backup_app.command("import")
def backup_import(source: Annotated[Path, typer.Argument(help="Backup (.json) or Markdown file.")]) -> None:
    """Merge a backup or a Markdown file into the store."""
    try:
        if source.suffix.lower() in (".md", ".markdown"):
            bundle = parse_markdown_file(source.read_text(encoding="utf-8"), source.name)
        else:
            bundle = read_backup(source)
    except (OSError, ValidationError) as exc:
        _fail(exc)
    summary = import_data(_open_studio(), bundle)
    console.print(
        f"Imported {summary.themes} themes, {summary.drafts} drafts, "
        f"{summary.published} published, {summary.icons} icons "
        f"({summary.skipped} skipped)"
    )


@app.command()
def heal() -> None:
    """Repair every stored collection and pointer."""
    summary = _open_studio().heal()
    for name, removed in summary.items():
        console.print(f"{name}: removed {removed}")
