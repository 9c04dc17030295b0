"""Questionary / prompt_toolkit theme for ACTOR-OPS.

Questionary uses prompt_toolkit under the hood. This module defines a single
central style so all interactive prompts (select/text/confirm) look consistent.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_SELECT = Style.from_dict(
    {
        "question": "bold ansicyan",
        "answer": "bold ansibrightgreen",
        "pointer": "bold ansibrightgreen",
        "highlighted": "bold ansibrightgreen",
        "selected": "bold ansibrightgreen",
        "separator": "ansibrightblack",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
        "disabled": "ansibrightblack",
    }
)

QUESTIONARY_STYLE_INPUT = Style.from_dict(
    {
        "question": "bold ansicyan",
        "answer": "ansibrightyellow",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)

QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)
