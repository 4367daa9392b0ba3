#!/usr/bin/env python
"""Command line entry point: rectify the HTML imgs in an Evernote account."""

import logging
import sys
from datetime import datetime
from typing import Optional

import click
import typer
from rich.console import Console
from rich.logging import RichHandler

from imgrectifier import open_rectifier
from imgrectifier.client import RemoteAuthError, RemoteNoteClient
from imgrectifier.config import RectifierOptions, load_api_identity
from imgrectifier.exceptions import (
    ConfigurationError,
    NotebookNotFound,
    UploadExhaustedError,
    VersionMismatchError,
)

app = typer.Typer(
    help="Download images referenced by HTML imgs in Evernote notes and attach them.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()
err_console = Console(stderr=True)

DATE_FORMATS = ["%Y-%m-%d"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                rich_tracebacks=True,
                show_time=True,
                log_time_format="%H:%M:%S",
            )
        ],
    )


def _make_client(options: RectifierOptions) -> RemoteNoteClient:
    # The SDK is only needed once we actually talk to Evernote.
    from imgrectifier.edam import EdamClient

    return EdamClient(options)


def _report_auth_failure(
    exc: RemoteAuthError, username: str, options: RectifierOptions
) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {exc}")
    if exc.error_code != "INVALID_AUTH":
        return
    hints = {
        "consumerKey": "the api key was not accepted!  is it activated for "
        f"{options.evernote_host}?",
        "username": f"'{username}' is not a valid username",
        "password": f"the password for {username} was invalid",
    }
    hint = hints.get(exc.parameter or "")
    if hint:
        err_console.print(hint)


@app.command()
def rectify(
    username: str = typer.Argument(..., help="Evernote username"),
    password: str = typer.Argument(..., help="Evernote password"),
    sandbox: bool = typer.Option(
        False,
        "--sandbox",
        "-s",
        help="uses the Evernote sandbox instance (for development)",
    ),
    notebook: Optional[str] = typer.Option(
        None,
        "--notebook",
        "-n",
        help="only processes notes in the notebook with the specified name",
    ),
    created: Optional[datetime] = typer.Option(
        None,
        "--created",
        "-c",
        formats=DATE_FORMATS,
        help="only processes notes created since the specified date (YYYY-MM-DD)",
    ),
    updated: Optional[datetime] = typer.Option(
        None,
        "--updated",
        "-u",
        formats=DATE_FORMATS,
        help="only processes notes updated since the specified date (YYYY-MM-DD)",
    ),
    reserve: int = typer.Option(
        0,
        "--reserve",
        "-r",
        min=0,
        help="bytes of upload allowance that must remain free",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging"),
):
    """Rectify the HTML imgs of every note in the account."""
    _configure_logging(verbose)

    try:
        identity = load_api_identity()
    except ConfigurationError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    options = RectifierOptions(
        sandbox=sandbox,
        notebook=notebook,
        created_since=created,
        updated_since=updated,
        reserve=reserve,
    )

    try:
        rectifier = open_rectifier(
            _make_client(options), identity, username, password, options
        )
    except RemoteAuthError as exc:
        _report_auth_failure(exc, username, options)
        raise typer.Exit(1) from exc
    except VersionMismatchError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    try:
        stats = rectifier.run()
    except NotebookNotFound as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(2) from exc
    except UploadExhaustedError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    console.print(
        f"Rectified [bold]{stats.images_rewritten}[/bold] image(s) in "
        f"[bold]{stats.notes_updated}[/bold] of {stats.notes_examined} note(s)"
    )


def main():
    """Main entry point for the CLI; usage errors exit with status 1."""
    try:
        code = app(standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        sys.exit(1)
    except click.Abort:
        err_console.print("Aborted!")
        sys.exit(1)
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
