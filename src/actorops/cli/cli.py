"""CLI application for the job platform."""

import typer

from actorops.cli.commands.jobs import app as jobs_app
from actorops.cli.common.context import build_client
from actorops.cli.common.exits import die
from actorops.cli.common.logging_setup import configure_logging
from actorops.cli.common.options import BaseUrlOpt, TokenOpt, VerboseOpt
from actorops.cli.common.output import out

app = typer.Typer(
    help="actor-ops - run platform jobs from the terminal",
    no_args_is_help=True,
)

app.add_typer(jobs_app, name="jobs", help="Find / inspect / run platform jobs.")


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose)


@app.command()
def whoami(
    token: str | None = TokenOpt,
    base_url: str | None = BaseUrlOpt,
):
    """
    Check that the API token is accepted by the platform.
    """
    with build_client(token, base_url) as client:
        with out.status("Validating API token..."):
            valid = client.validate_credential()

    if not valid:
        die("The API token was rejected or the platform is unreachable.", code=1)
    out.success("API token is valid")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
