"""mdf command line: interactive finder, fuzzy open and repo management."""

import sys
from typing import List, Optional, Annotated

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from . import __version__
from .errors import MdfError
from .items import FolderItem
from .locator import find_snippet
from .logger import get_logger
from .models import Folder, FocusState
from .runtime import RuntimeContext, bootstrap_runtime_context
from .styles import Styles

logger = get_logger("cli")

VERSION = f"v{__version__}"
APP_NAME = "mdf"

app = typer.Typer(
    help=f"{APP_NAME} - browse, fuzzy-find and copy markdown snippets",
    epilog="Examples: mdf | mdf docker | mdf list folder | mdf get repo user/snippets | cat notes.md | mdf save misc/notes.md",
    context_settings={"help_option_names": ["-h", "--help"]},
)

list_group = typer.Typer(help="List snippets, folders or repos", invoke_without_command=True, no_args_is_help=True)
get_group = typer.Typer(help="Fetch repos", invoke_without_command=True, no_args_is_help=True)
set_group = typer.Typer(help="Switch the active repo or folder", invoke_without_command=True, no_args_is_help=True)

app.add_typer(list_group, name="list")
app.add_typer(get_group, name="get")
app.add_typer(set_group, name="set")

KNOWN_ENTRYPOINTS = {"list", "get", "set", "save", "version"}

console = Console()

_context: Optional[RuntimeContext] = None


def get_context() -> RuntimeContext:
    """Get or create the runtime context."""
    global _context
    if _context is None:
        try:
            _context = bootstrap_runtime_context()
        except MdfError as e:
            logger.error(f"Startup failed: {e}")
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
    return _context


def _choose(title: str, options: List[str], current: Optional[str]) -> str:
    """Numbered menu on the console; returns the chosen option."""
    console.print(f"[bold]{title}[/bold]")
    for i, option in enumerate(options, 1):
        marker = "[magenta]>[/magenta]" if option == current else " "
        console.print(f" {marker} {i}. {option}")

    default = str(options.index(current) + 1) if current in options else "1"
    choice = Prompt.ask("Number", choices=[str(i) for i in range(1, len(options) + 1)], default=default)
    return options[int(choice) - 1]


@list_group.command("snippet")
def list_snippet():
    """List every snippet as folder/name.language."""
    for snippet in get_context().snippets:
        typer.echo(str(snippet))


@list_group.command("folder")
def list_folder():
    """List folders of the active repo."""
    ctx = get_context()
    palette = Styles.from_config(ctx.config)
    for name in ctx.folders():
        item = FolderItem(Folder(name))
        console.print(item.render(name == ctx.config.folder_name, FocusState.FOCUSED, palette))


@list_group.command("repo")
def list_repo():
    """List registered repos, marking the active one."""
    ctx = get_context()
    palette = Styles.from_config(ctx.config)
    try:
        repos = ctx.registry.load()
    except MdfError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)

    for repo in repos:
        if repo.name == ctx.config.repo_name:
            console.print(Text(f"> {repo.name}", style=palette.selected_item))
        else:
            console.print(Text(f"  {repo.name}", style=palette.unselected_item))


@get_group.command("repo")
def get_repo(
    url: Annotated[str, typer.Argument(help="GitHub repo: user/repo, https or git@ URL")]
):
    """Clone a GitHub repo of snippets."""
    try:
        repo = get_context().registry.get(url)
    except MdfError as e:
        typer.echo(f"Failed to get repo: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Successfully added repo: {repo.name}")


@set_group.command("repo")
def set_repo():
    """Choose the active repo."""
    ctx = get_context()
    try:
        repos = ctx.registry.load()
    except MdfError as e:
        typer.echo(f"set repo failed: {e}", err=True)
        raise typer.Exit(1)
    if not repos:
        typer.echo("No repos registered", err=True)
        raise typer.Exit(1)

    name = _choose("Choose a repo", [repo.name for repo in repos], ctx.config.repo_name)
    ctx.select_repo(name)
    typer.echo(f"Active repo: {name}")


@set_group.command("folder")
def set_folder():
    """Choose the folder shown when the finder opens."""
    ctx = get_context()
    name = _choose("Choose a folder", ctx.folders(), ctx.config.folder_name)
    ctx.select_folder(name)
    typer.echo(f"Active folder: {name}")


@app.command()
def save(
    name: Annotated[str, typer.Argument(help="Snippet name as folder/name.ext")] = "",
):
    """Save stdin as a new snippet."""
    content = "" if sys.stdin.isatty() else sys.stdin.read()
    if not content.strip():
        typer.echo("Nothing to save: pipe the snippet body on stdin", err=True)
        raise typer.Exit(1)

    ctx = get_context()
    try:
        snippet, ctx.snippets = ctx.library.save(content, name, ctx.snippets)
    except (MdfError, OSError) as e:
        typer.echo(f"Unable to save snippet: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Saved {snippet}")


@app.command()
def version():
    """Show version."""
    typer.echo(VERSION)


def run_interactive(query: Optional[str] = None) -> None:
    """Open the finder, optionally jumping to the best match for ``query``."""
    from .tui import FinderApp

    ctx = get_context()
    target = find_snippet(query, ctx.snippets) if query else None
    if query:
        logger.info(f"Fuzzy open for '{query}': {target or 'no match'}")

    finder = FinderApp(ctx.config, ctx.library, ctx.snippets, target=target)
    finder.run()
    ctx.library.flush(finder.navigator.all_snippets())


def main():
    """Entry point for the mdf CLI."""
    args = sys.argv[1:]

    if args and args[0] in ("-v", "--version"):
        typer.echo(VERSION)
        return

    # Bare words that are not commands are a fuzzy query
    if not args or (args[0] not in KNOWN_ENTRYPOINTS and not any(x in args for x in ("-h", "--help"))):
        query = " ".join(args) or None
        try:
            run_interactive(query)
        except KeyboardInterrupt:
            pass
        except typer.Exit as e:
            sys.exit(e.exit_code)
        except MdfError as e:
            logger.error(f"Interactive mode failed: {e}")
            typer.echo(f"Error: {e}", err=True)
            sys.exit(1)
        return

    app()


if __name__ == "__main__":
    main()
