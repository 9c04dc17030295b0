"""Commands for browsing and running platform jobs."""

import json
from pathlib import Path
from typing import Any

import typer

from actorops.cli.common.context import JobsAppContext, build_jobs_context
from actorops.cli.common.exits import die, exit_from_exc, ok_exit, platform_errors, warn_exit
from actorops.cli.common.options import (
    BaseUrlOpt,
    ConfirmOpt,
    DryRunOpt,
    InputFileOpt,
    InputOpt,
    LimitOpt,
    MaxWaitOpt,
    NameOpt,
    OwnerOpt,
    SearchOpt,
    TokenOpt,
    UseOrOpt,
    WatchOpt,
)
from actorops.cli.common.output import out
from actorops.cli.common.progress import run_progress
from actorops.cli.common.selector_builder import build_selector
from actorops.cli.tui import FormCancelled, prompt_inputs, select_job
from actorops.core.adapters.platform import select_build_tag
from actorops.core.jobs import Job, RunStatus, select_jobs
from actorops.core.runs import run_job, summarize_run
from actorops.core.schema import JobSchema, default_inputs, missing_required, schema_from_detail

app = typer.Typer(
    help="Browse and run platform jobs",
    no_args_is_help=False,
    invoke_without_command=True,
)


@app.callback()
def _init(
    ctx: typer.Context,
    token: str | None = TokenOpt,
    base_url: str | None = BaseUrlOpt,
):
    """Initialize jobs context."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    # Build shared context (client) once per invocation
    appctx = build_jobs_context(token, base_url)
    ctx.obj = appctx
    ctx.call_on_close(appctx.client.close)


def _load_input(input_json: str | None, input_file: Path | None) -> dict[str, Any] | None:
    """Parse run input given on the command line, if any."""
    if input_json is not None and input_file is not None:
        die("Use either --input or --input-file, not both.", code=2)
    raw = input_file.read_text(encoding="utf-8") if input_file is not None else input_json
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError as exc:
        exit_from_exc(exc, message=f"Invalid JSON input: {exc}", code=2)
    if not isinstance(value, dict):
        die("Run input must be a JSON object.", code=2)
    return value


def _load_job(appctx: JobsAppContext, job_id: str) -> tuple[Job, JobSchema]:
    """Return the job named by id or owner~name together with its input schema."""
    with out.status("Loading job..."):
        detail = appctx.client.get_job_detail(job_id)
    job = Job.from_payload({**detail, "id": job_id})
    return job, schema_from_detail(detail)


def _pick_job(appctx: JobsAppContext) -> Job:
    """Let the user pick one of their jobs interactively."""
    with out.status("Loading jobs..."):
        jobs = appctx.client.list_jobs()

    if not jobs:
        warn_exit("No jobs found", code=0)

    picked = select_job(jobs)
    if picked is None:
        warn_exit("No job selected", code=0)
    return picked


def _collect_input(schema: JobSchema, given: dict[str, Any] | None) -> dict[str, Any]:
    """Return the run input: the given one, or the answers to the field prompts."""
    if given is not None:
        return given

    defaults = default_inputs(schema)
    if schema.is_empty:
        out.info("This job declares no input fields.")
        return defaults

    out.header("Run input")
    try:
        return prompt_inputs(schema, defaults)
    except FormCancelled:
        ok_exit("Cancelled")


@app.command()
def find(
    ctx: typer.Context,
    name: str | None = NameOpt,
    search: str | None = SearchOpt,
    owner: str | None = OwnerOpt,
    use_or: bool = UseOrOpt,
):
    """
    Find jobs using selectors (all jobs without any).
    """
    appctx: JobsAppContext = ctx.obj

    try:
        selector = build_selector(name=name, search=search, owner=owner, use_or=use_or)
    except ValueError as e:
        die(str(e), code=2)

    with platform_errors(), out.status("Loading jobs..."):
        jobs = select_jobs(appctx.client, selector)

    if not jobs:
        warn_exit("No jobs found", code=0)

    out.jobs_table(jobs, title="Jobs")


@app.command()
def schema(
    ctx: typer.Context,
    job_id: str = typer.Argument(..., help="Job id or owner~name"),
):
    """
    Show the input fields of a job.
    """
    appctx: JobsAppContext = ctx.obj

    with platform_errors(), out.status("Loading schema..."):
        job_schema = appctx.client.get_job_schema(job_id)

    if job_schema.is_empty:
        warn_exit("This job declares no input fields.", code=0)

    out.schema_table(job_schema, title=f"Input schema of {job_id}")


@app.command()
def builds(
    ctx: typer.Context,
    job_id: str = typer.Argument(..., help="Job id or owner~name"),
):
    """
    Show recent builds of a job and the build tag a run would use.
    """
    appctx: JobsAppContext = ctx.obj

    with platform_errors(), out.status("Loading builds..."):
        result = appctx.client.fetch_builds(job_id)

    if result.error is not None:
        out.warn(f"Builds could not be listed: {result.error}")
    elif not result.builds:
        out.warn("No builds found")
    else:
        out.builds_table(result.builds, title=f"Builds of {job_id}")

    out.info(f"Runs will use build tag: [ok]{select_build_tag(result.builds)}[/]")


@app.command()
def run(
    ctx: typer.Context,
    job_id: str | None = typer.Argument(None, help="Job id or owner~name (prompted if omitted)"),
    input_json: str | None = InputOpt,
    input_file: Path | None = InputFileOpt,
    confirm: bool = ConfirmOpt,
    watch: bool = WatchOpt,
    max_wait: float | None = MaxWaitOpt,
    limit: int = LimitOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Run a job, wait for it and show its results.
    """
    appctx: JobsAppContext = ctx.obj
    client = appctx.client
    given = _load_input(input_json, input_file)

    with platform_errors():
        if job_id:
            job, job_schema = _load_job(appctx, job_id)
        else:
            job = _pick_job(appctx)
            with out.status("Loading schema..."):
                job_schema = client.get_job_schema(job.id)

    run_input = _collect_input(job_schema, given)

    missing = missing_required(job_schema, run_input)
    if missing:
        labels = [
            job_schema.properties[k].label(k) if k in job_schema.properties else k
            for k in missing
        ]
        die(f"Missing required fields: {', '.join(labels)}", code=2)

    out.header(f"Run {job.title or job.id}")
    out.json(run_input)

    if dry_run:
        warn_exit("Dry-run enabled: no run was started", code=0)

    if confirm and not out.confirm("Start the run?"):
        ok_exit("Cancelled")

    if not watch:
        with platform_errors(), out.status("Starting run..."):
            started = client.execute(job.id, run_input)
        out.success(f"Run started: {started.id}")
        out.kv(summarize_run(started))
        raise typer.Exit(0)

    with platform_errors():
        with run_progress(job.id, job) as on_update:
            outcome = run_job(
                client,
                job.id,
                run_input,
                max_wait=max_wait,
                on_update=on_update,
            )

    final = outcome.run
    out.kv(summarize_run(final))

    if final.status != RunStatus.SUCCEEDED:
        die(f"Run finished with status {final.status.value}", code=1)

    out.success("Run succeeded")
    if outcome.message:
        out.warn(outcome.message)
    elif outcome.results is not None:
        out.results_preview(outcome.results.head(limit), total=len(outcome.results))
