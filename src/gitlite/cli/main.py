"""Main CLI entry point for GitLite."""

import json
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from gitlite.constants import (
    EXIT_DATA_ERROR,
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    GITLITE_DIR,
    IGNORE_FILE,
)
from gitlite.core import NotARepositoryError, Repository
from gitlite.diff import DiffSegment, NoParentError, summarize
from gitlite.storage import (
    CommitFormatError,
    NothingToCommitError,
    ObjectCorruptedError,
    ObjectNotFoundError,
)

console = Console()
app = typer.Typer(
    name="gitlite",
    help="A minimal local version-control engine",
    add_completion=False,
)

SEGMENT_STYLES = {
    "added": "green",
    "removed": "red",
    "unchanged": "",
}
LINE_PREFIXES = {
    "added": "+",
    "removed": "-",
    "unchanged": " ",
}


def _open_repository() -> Repository:
    """Open the repository in the current directory or exit with an error."""
    workspace_root = Path.cwd()
    try:
        return Repository(workspace_root)
    except NotARepositoryError:
        console.print(
            "[bold red]Error:[/bold red] Not a GitLite repository",
            style="red",
        )
        console.print(
            f"  No {GITLITE_DIR}/ directory found in {escape(str(workspace_root))}",
            style="dim",
        )
        console.print(
            "\nRun [bold]gitlite init[/bold] to initialize a repository",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)


def _fail(error: Exception) -> NoReturn:
    """Report an error and exit with the code for its kind."""
    if isinstance(error, (ObjectNotFoundError, ObjectCorruptedError, CommitFormatError)):
        code = EXIT_DATA_ERROR
    elif isinstance(error, OSError):
        code = EXIT_SYSTEM_ERROR
    else:
        code = EXIT_USER_ERROR

    console.print(
        f"[bold red]Error:[/bold red] {escape(str(error))}",
        style="red",
    )
    raise typer.Exit(code)


@app.command()
def version() -> None:
    """Show GitLite version."""
    from gitlite import __version__
    typer.echo(f"GitLite version {__version__}")


@app.command()
def init(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Initialize a GitLite repository in the current directory."""
    workspace_root = Path.cwd()

    try:
        repo, created = Repository.init(workspace_root)
    except OSError as e:
        _fail(e)

    if quiet:
        return

    if not created:
        console.print(
            f"[dim]GitLite repository already initialized in "
            f"{escape(str(repo.gitlite_dir))}[/dim]"
        )
        return

    success_message = f"""[bold green]✓[/bold green] Initialized GitLite repository

[dim]Repository root:[/dim] {escape(str(repo.workspace_root))}
[dim]Storage location:[/dim] {escape(str(repo.gitlite_dir))}
[dim]Ignore rules:[/dim] {IGNORE_FILE} (one regular expression per line)

[bold]Next steps:[/bold]
  1. Stage files: [cyan]gitlite add .[/cyan]
  2. Create a commit: [cyan]gitlite commit "Initial commit"[/cyan]
  3. Review history: [cyan]gitlite log[/cyan]
"""
    console.print(Panel(success_message, border_style="green", title="GitLite Initialized"))


@app.command()
def add(
    paths: List[str] = typer.Argument(..., help="Files or directories to add ('.' for all)"),
) -> None:
    """Add files to the staging area."""
    repo = _open_repository()

    console.print("[bold]Staging files...[/bold]\n")
    try:
        stats = repo.add(paths)
    except OSError as e:
        _fail(e)

    if stats["added"]:
        console.print("[bold green]Added:[/bold green]")
        for path, digest in stats["added"]:
            console.print(f"  [green]+[/green] {escape(path)}  [dim]({digest[:8]})[/dim]")

    if stats["duplicates"]:
        console.print("\n[bold yellow]Skipped (content already stored):[/bold yellow]")
        for path, digest in stats["duplicates"]:
            console.print(f"  [yellow]=[/yellow] {escape(path)}  [dim]({digest[:8]})[/dim]")

    if stats["ignored"]:
        console.print("\n[bold dim]Ignored:[/bold dim]")
        for path in stats["ignored"]:
            console.print(f"  [dim]-[/dim] {escape(path)}  [dim]({IGNORE_FILE})[/dim]")

    if stats["missing"]:
        console.print("\n[bold red]Not found:[/bold red]")
        for path in stats["missing"]:
            console.print(f"  [red]x[/red] {escape(path)}")

    total_added = len(stats["added"])
    if total_added > 0:
        console.print(f"\n[bold green]>[/bold green] {total_added} file(s) staged for commit")
    else:
        console.print("\n[yellow]No files staged[/yellow]")


@app.command()
def commit(
    message: str = typer.Argument(..., help="Commit message"),
) -> None:
    """Commit staged files as a snapshot."""
    repo = _open_repository()

    try:
        new_commit = repo.commit(message)
    except NothingToCommitError:
        console.print(
            "[bold yellow]Warning:[/bold yellow] Nothing to commit (staging area is empty)",
            style="yellow",
        )
        console.print(
            "  Use [bold]gitlite add <files>[/bold] to stage files",
            style="dim",
        )
        raise typer.Exit(EXIT_USER_ERROR)
    except OSError as e:
        _fail(e)

    console.print(
        f"\n[bold green]>[/bold green] Committed [bold cyan]{new_commit.hash}[/bold cyan]"
    )
    console.print(f"  [dim]Date:[/dim]    {new_commit.time}")
    parent = "(root commit)" if new_commit.is_root else new_commit.parent[:7]
    console.print(f"  [dim]Parent:[/dim]  {parent}")
    console.print(f"  [dim]Files:[/dim]   {len(new_commit.changes)}")
    console.print(f"\n  {escape(message)}")


@app.command()
def log(
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        min=1,
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
) -> None:
    """Show commit history, newest first."""
    repo = _open_repository()

    if repo.read_head() is None:
        console.print("[dim]No commits yet[/dim]")
        return

    try:
        first = True
        for entry in repo.log(limit=max_count):
            if oneline:
                summary = entry.message.split("\n")[0]
                console.print(f"[yellow]{entry.hash[:7]}[/yellow] {escape(summary)}")
                continue

            if not first:
                console.print()
            first = False

            console.print(f"[bold yellow]commit {entry.hash}[/bold yellow]")
            if entry.is_root:
                console.print("[dim]Parent: (root commit)[/dim]")
            else:
                console.print(f"[dim]Parent: {entry.parent[:7]}[/dim]")
            console.print(f"[bold]Date:[/bold]   {escape(entry.time)}")
            console.print()

            for line in entry.message.split("\n"):
                console.print(f"    {escape(line)}")
            console.print()

            for change in entry.changes:
                console.print(f"    {escape(change.path)}  [dim]({change.hash[:8]})[/dim]")
    except (ObjectNotFoundError, CommitFormatError, OSError) as e:
        _fail(e)


@app.command()
def status() -> None:
    """Show HEAD and the staging area."""
    repo = _open_repository()

    head = repo.read_head()
    entries = repo.staged_entries()

    if head:
        console.print(f"[bold]HEAD:[/bold] {head[:7]}  [dim]({head})[/dim]")
    else:
        console.print("[bold]HEAD:[/bold] [dim](no commits yet)[/dim]")

    console.print()

    if entries:
        console.print("[bold green]Changes to be committed:[/bold green]")
        console.print("  [dim](use \"gitlite commit <message>\" to commit)[/dim]\n")
        for entry in entries:
            console.print(
                f"  [green]+[/green] {escape(entry.path)}  [dim]({entry.hash[:8]})[/dim]"
            )
        console.print()
    elif head:
        console.print("[dim]Nothing to commit (staging area is empty)[/dim]\n")
    else:
        console.print("[yellow]No files staged for commit[/yellow]")
        console.print("  Use [bold]gitlite add <file>[/bold] to stage files\n")


def _print_line_diff(segments: List[DiffSegment]) -> None:
    for segment in segments:
        prefix = LINE_PREFIXES[segment.status]
        style = SEGMENT_STYLES[segment.status]
        for line in segment.text.splitlines():
            console.print(Text(f"{prefix} {line}", style=style))


def _print_char_diff(segments: List[DiffSegment]) -> None:
    text = Text()
    for segment in segments:
        if segment.removed:
            style = "red strike"
        elif segment.added:
            style = "bold green"
        else:
            style = ""
        text.append(segment.text, style=style)
    console.print(text)


@app.command()
def diff(
    revision: str = typer.Argument(..., help="Commit hash (full or abbreviated)"),
    summary: bool = typer.Option(
        False,
        "--summary",
        help="Show only per-file line counts",
    ),
    format: str = typer.Option(  # noqa: A002
        "text",
        "--format",
        help="Output format: text, json",
    ),
) -> None:
    """Show changes a commit made relative to its parent."""
    if format not in ("text", "json"):
        console.print(f"[bold red]Error:[/bold red] Unknown format: {escape(format)}")
        raise typer.Exit(EXIT_USER_ERROR)

    repo = _open_repository()

    try:
        report = repo.diff(revision)
    except NoParentError:
        console.print("[dim]No parent commit found (nothing to compare against)[/dim]")
        raise typer.Exit(EXIT_SUCCESS)
    except Exception as e:
        _fail(e)

    if format == "json":
        typer.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return

    console.print(
        f"[bold]Comparing:[/bold] {report.parent.hash[:7]} → {report.commit.hash[:7]}\n"
    )

    for file_diff in report.files:
        path = escape(file_diff.path)

        if file_diff.is_new:
            console.print(f"[bold green]New file:[/bold green] {path}\n")
            continue

        if summary:
            counts = summarize(file_diff.line_diff)
            console.print(
                f"[bold yellow]~ {path}[/bold yellow]  "
                f"[green]+{counts['added']}[/green] [red]-{counts['removed']}[/red]"
            )
            continue

        console.print(f"[bold yellow]Line changes in:[/bold yellow] {path}")
        _print_line_diff(file_diff.line_diff)
        console.print()

        console.print(f"[bold yellow]Character changes in:[/bold yellow] {path}")
        _print_char_diff(file_diff.char_diff)
        console.print()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
