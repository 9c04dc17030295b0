"""Common CLI options for the CLI."""

import typer

TokenOpt = typer.Option(
    None,
    "--token",
    "-t",
    help="Platform API token (defaults to $ACTOROPS_TOKEN or $APIFY_TOKEN)",
    show_default=False,
)

BaseUrlOpt = typer.Option(
    None,
    "--base-url",
    help="Platform API base URL (defaults to $ACTOROPS_BASE_URL or the public API)",
    show_default=False,
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log platform requests and retries",
)

NameOpt = typer.Option(
    None,
    "--name",
    help="Regex on job name",
)

SearchOpt = typer.Option(
    None,
    "--search",
    "-s",
    help="Case-insensitive text search on name, title and description",
)

OwnerOpt = typer.Option(
    None,
    "--owner",
    help="Only jobs owned by this username",
)

UseOrOpt = typer.Option(
    False,
    "--or",
    help="Use OR instead of AND between selectors",
)

InputOpt = typer.Option(
    None,
    "--input",
    "-i",
    help="Run input as a JSON object (skips the input prompts)",
    show_default=False,
)

InputFileOpt = typer.Option(
    None,
    "--input-file",
    help="Read the run input from a JSON file",
    exists=True,
    dir_okay=False,
    show_default=False,
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before starting the run",
)

WatchOpt = typer.Option(
    True,
    "--watch/--no-watch",
    "-w",
    help="Wait until the run is complete and show its results",
)

MaxWaitOpt = typer.Option(
    None,
    "--max-wait",
    help="Seconds to wait for the run before giving up (default 300)",
    min=1,
    show_default=False,
)

LimitOpt = typer.Option(
    10,
    "--limit",
    "-n",
    help="Number of result items to display",
    min=0,
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show the job and input that would run, but don't start anything",
)

