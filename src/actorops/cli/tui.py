"""Terminal UI utilities: job picker and schema-driven input form."""

from __future__ import annotations

import json
from typing import Any

import questionary

from actorops.cli.common.tui_style import QUESTIONARY_STYLE_INPUT, QUESTIONARY_STYLE_SELECT
from actorops.core.jobs import Job
from actorops.core.schema import FieldKind, FieldSpec, JobSchema, coerce_value

_MAX_JOB_NAME_WIDTH = 72


class FormCancelled(Exception):
    """Raised when the user aborts a prompt (Ctrl-C)."""


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _job_choice_title(job: Job, *, name_width: int) -> str:
    """Format one job choice as `<title>  (id: <job_id>)` with aligned id column."""
    short_name = _truncate(job.title or job.name, _MAX_JOB_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  (id: {job.id})"


def select_job(jobs: list[Job]) -> Job | None:
    """Display a select prompt to pick one job.

    Returns:
        The chosen Job, or None if the prompt was cancelled.
    """
    shown_names = [_truncate(job.title or job.name, _MAX_JOB_NAME_WIDTH) for job in jobs]
    name_width = max((len(name) for name in shown_names), default=0)

    choices = [
        questionary.Choice(
            title=_job_choice_title(job, name_width=name_width),
            value=job,
        )
        for job in jobs
    ]
    return questionary.select(
        "Select a job:",
        choices=choices,
        style=QUESTIONARY_STYLE_SELECT,
    ).ask()


def _field_prompt(key: str, spec: FieldSpec, required: bool) -> str:
    label = spec.label(key)
    marker = " *" if required else ""
    return f"{label}{marker} [{spec.kind.value}]"


def _display_default(value: Any) -> str:
    """Render a default value as editable prompt text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value) if value else ""
    return str(value)


def _validator(spec: FieldSpec):
    def _validate(text: str) -> bool | str:
        try:
            coerce_value(spec, text)
        except ValueError as exc:
            return str(exc) or f"Invalid {spec.kind.value} value"
        return True

    return _validate


def _ask(question: questionary.Question) -> Any:
    answer = question.ask()
    if answer is None:
        raise FormCancelled()
    return answer


def prompt_field(key: str, spec: FieldSpec, *, required: bool, current: Any) -> Any:
    """
    Prompt one field and return its typed value (None when left empty).

    Raises:
        FormCancelled: If the prompt was aborted.
    """
    message = _field_prompt(key, spec, required)
    instruction = spec.description or None

    if spec.kind == FieldKind.BOOLEAN:
        return bool(
            _ask(
                questionary.confirm(
                    message,
                    default=bool(current),
                    style=QUESTIONARY_STYLE_INPUT,
                    instruction=instruction,
                )
            )
        )

    if spec.kind == FieldKind.ENUM and spec.enum_values:
        options = [str(v) for v in spec.enum_values]
        default = str(current) if current is not None and str(current) in options else None
        picked = _ask(
            questionary.select(
                message,
                choices=options,
                default=default,
                style=QUESTIONARY_STYLE_SELECT,
                instruction=instruction,
            )
        )
        return coerce_value(spec, picked)

    if spec.kind == FieldKind.ARRAY:
        instruction = instruction or "Comma separated values or a JSON array"
    elif spec.kind == FieldKind.OBJECT:
        instruction = instruction or "A JSON object"

    text = _ask(
        questionary.text(
            message,
            default=_display_default(current),
            validate=_validator(spec),
            style=QUESTIONARY_STYLE_INPUT,
            instruction=instruction,
        )
    )
    return coerce_value(spec, text)


def prompt_inputs(schema: JobSchema, defaults: dict[str, Any]) -> dict[str, Any]:
    """
    Prompt every schema field, prefilled with `defaults`.

    Fields left empty are omitted from the returned input.

    Raises:
        FormCancelled: If any prompt was aborted.
    """
    values: dict[str, Any] = {}
    for key, spec in schema.properties.items():
        value = prompt_field(
            key,
            spec,
            required=key in schema.required,
            current=defaults.get(key),
        )
        if value is not None:
            values[key] = value
    return values
