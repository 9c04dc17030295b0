from actorops.cli.tui import _MAX_JOB_NAME_WIDTH, _display_default, _job_choice_title, _truncate
from actorops.core.jobs import Job


def test_job_choice_title_shows_title_before_id_and_aligns_id_column():
    first = _job_choice_title(Job(id="a11", name="alpha", title="Alpha"), name_width=12)
    second = _job_choice_title(Job(id="a22", name="beta", title=""), name_width=12)

    assert first.startswith("Alpha")
    assert second.startswith("beta")
    assert first.index("(id: ") == second.index("(id: ")


def test_job_choice_title_truncates_long_titles():
    long_title = "x" * (_MAX_JOB_NAME_WIDTH + 10)
    rendered = _job_choice_title(
        Job(id="a99", name="n", title=long_title),
        name_width=_MAX_JOB_NAME_WIDTH,
    )

    assert "..." in rendered
    assert "(id: a99)" in rendered
    assert _truncate(long_title, _MAX_JOB_NAME_WIDTH).endswith("...")


def test_display_default_renders_editable_text():
    assert _display_default(None) == ""
    assert _display_default(True) == "true"
    assert _display_default([]) == ""
    assert _display_default(["a"]) == '["a"]'
    assert _display_default(5) == "5"
