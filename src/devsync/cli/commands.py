"""CLI command implementations"""

import logging
from typing import Annotated, Optional

import typer

from devsync.config import Settings, load_config
from devsync.core.content import ContentError
from devsync.core.models import Action, Mode, Outcome
from devsync.core.pipeline import make_sync, run_sync
from devsync.core.utils.logging import configure_logging
from devsync.remote.client import DevtoError


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(ctx: typer.Context) -> Settings:
    """Settings loaded by the main callback; requires an API key."""
    settings: Settings = ctx.obj
    if not settings.api_key:
        _fail("no API key given, either give it with --apikey or with DEVTO_APIKEY")
    return settings


def _label(text: str, color: str) -> str:
    return typer.style(text, fg=color)


def _echo_diff(lines: list[str]) -> None:
    """Print diff lines, colored by kind."""
    for line in lines:
        line = line.rstrip("\n")
        if line.startswith(("+++", "---")):
            typer.echo(typer.style(line, bold=True))
        elif line.startswith("@@"):
            typer.echo(_label(line, typer.colors.CYAN))
        elif line.startswith("+"):
            typer.echo(_label(line, typer.colors.GREEN))
        elif line.startswith("-"):
            typer.echo(_label(line, typer.colors.RED))
        else:
            typer.echo(line)


def _echo_outcome(outcome: Outcome) -> None:
    """Print what stdout should show for one post; errors were already logged."""
    if outcome.action == Action.preview:
        typer.echo(outcome.document, nl=False)
    elif outcome.action == Action.diff:
        _echo_diff(outcome.diff or [])
    elif outcome.action == Action.dry_run:
        typer.echo(f"{_label('info', typer.colors.YELLOW)}: {outcome.message}")
    elif outcome.action == Action.pushed:
        typer.echo(f"{_label('success', typer.colors.GREEN)}: {outcome.message}")


def _run(ctx: typer.Context, mode: Mode, post: Optional[str]) -> None:
    """Reconcile the selected posts and exit 1 if any of them ended in an error."""
    settings = _settings(ctx)
    errors = 0
    try:
        for outcome in run_sync(settings, mode, post):
            _echo_outcome(outcome)
            if outcome.is_error:
                errors += 1
    except ContentError as e:
        _fail(str(e))
    except DevtoError as e:
        _fail("listing all the user's articles", e)
    if errors:
        raise typer.Exit(1)


def main_callback(
    ctx: typer.Context,
    root: Annotated[Optional[str], typer.Option("--root", help="Root directory of the static site")] = None,
    api_key: Annotated[Optional[str], typer.Option("--apikey", help="dev.to API key (or set DEVTO_APIKEY)")] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Print debug information such as the HTTP requests in curl format")] = False,
    log_format: Annotated[Optional[str], typer.Option("--log-format", help="text or json")] = None,
    record_url: Annotated[bool, typer.Option("--record-url", help="Write the dev.to URL into the front matter after a push")] = False,
    ):
    """Synchronize static site posts with dev.to articles (one way, only when changed)."""
    try:
        settings = load_config(overrides={
            "root_dir": root, "api_key": api_key, "debug": debug or None,
            "log_format": log_format, "record_url": record_url or None,
        })
    except ValueError as e:
        _fail(str(e))
    configure_logging(
        level=logging.DEBUG if settings.debug else logging.INFO,
        structured=settings.log_format == "json",
    )
    ctx.obj = settings


def status_cmd(
    ctx: typer.Context,
    post: Annotated[Optional[str], typer.Argument(help="Post file or URL path; all posts when omitted")] = None,
    ):
    """Show whether each post is mapped and whether a push is needed."""
    _run(ctx, Mode.status, post)


def preview_cmd(
    ctx: typer.Context,
    post: Annotated[str, typer.Argument(help="Post file or URL path")],
    ):
    """Print the post converted to dev.to markdown."""
    _run(ctx, Mode.preview, post)


def diff_cmd(
    ctx: typer.Context,
    post: Annotated[Optional[str], typer.Argument(help="Post file or URL path; all posts when omitted")] = None,
    ):
    """Show the diff between the dev.to article and the converted post."""
    _run(ctx, Mode.diff, post)


def push_cmd(
    ctx: typer.Context,
    post: Annotated[Optional[str], typer.Argument(help="Post file or URL path; all posts when omitted")] = None,
    ):
    """Push changed posts to dev.to."""
    _run(ctx, Mode.push, post)


def list_cmd(
    ctx: typer.Context,
    article_id: Annotated[Optional[int], typer.Option("--id", help="Show a single published article")] = None,
    ):
    """List the articles of your dev.to account."""
    settings = _settings(ctx)
    sync = make_sync(settings)

    if article_id is not None:
        try:
            article = sync.get(article_id)
        except DevtoError as e:
            _fail(f"fetching article {article_id}", e)
        if article is None:
            _fail(f"article {article_id} not found (unpublished articles cannot be fetched by id)")
        articles = [article]
    else:
        try:
            articles = sync.list_all()
        except DevtoError as e:
            _fail("listing user's articles on dev.to", e)

    for art in articles:
        status = (_label("published", typer.colors.GREEN) if art.published
                  else _label("unpublished", typer.colors.RED))
        typer.echo(f"{art.id}: {status} at {_label(art.edit_url(), typer.colors.YELLOW)} ({art.title})")
