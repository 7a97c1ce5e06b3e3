from __future__ import annotations

import sys

import questionary
from questionary import Choice, Style

# Use questionary for inline, non-fullscreen selections instead of dialog boxes.

_SELECT_STYLE = Style(
    [
        ("pointer", "ansiyellow bold"),
        ("selected", "ansicyan bold"),
        ("highlighted", "ansicyan bold"),
        ("instruction", "ansiblack"),
        ("checkbox-selected", "ansigreen bold"),
    ]
)


def is_interactive() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def select_item(message: str, choices: list[Choice]) -> str | None:
    try:
        result = questionary.select(
            message,
            choices=choices,
            default=None,
            use_shortcuts=False,
            pointer="▶",
            style=_SELECT_STYLE,
        ).ask()
    except KeyboardInterrupt:
        return None
    if result is None:
        return None
    return str(result)


def select_many(message: str, choices: list[Choice]) -> list[str] | None:
    try:
        result = questionary.checkbox(
            message,
            choices=choices,
            pointer="▶",
            style=_SELECT_STYLE,
        ).ask()
    except KeyboardInterrupt:
        return None
    if result is None:
        return None
    return [str(item) for item in result]


def confirm_choice(message: object, *, default: bool = True) -> bool:
    prompt = str(getattr(message, "plain", message))
    try:
        result = questionary.confirm(prompt, default=default, style=_SELECT_STYLE).ask()
    except KeyboardInterrupt:
        return False
    return bool(result)


def ask_positive_int(message: str, *, default: int) -> int | None:
    def _validate(value: str) -> bool | str:
        if value.strip().isdigit() and int(value) > 0:
            return True
        return "Enter a positive number."

    try:
        result = questionary.text(message, default=str(default), validate=_validate, style=_SELECT_STYLE).ask()
    except KeyboardInterrupt:
        return None
    if result is None:
        return None
    return int(result.strip())


def ask_text(message: str, *, default: str = "") -> str | None:
    try:
        result = questionary.text(message, default=default, style=_SELECT_STYLE).ask()
    except KeyboardInterrupt:
        return None
    if result is None:
        return None
    return result.strip() or default
