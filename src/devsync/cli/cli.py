"""CLI entrypoint: Typer app definition and command registration"""

import typer

from devsync.cli.commands import (
    diff_cmd,
    list_cmd,
    main_callback,
    preview_cmd,
    push_cmd,
    status_cmd,
)


app = typer.Typer(name="devsync", no_args_is_help=True, help="One-way sync of static site posts to dev.to")

app.callback()(main_callback)
app.command(name="status")(status_cmd)
app.command(name="preview")(preview_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="push")(push_cmd)
app.command(name="list")(list_cmd)
