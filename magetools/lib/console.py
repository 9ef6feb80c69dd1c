"""Interactive prompt and option parsing helpers."""
from __future__ import annotations

from typing import Callable, Optional

TRUE_VALUES = {"1", "y", "yes", "true", "on"}


def parse_bool_option(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    return text in TRUE_VALUES


def ask_confirmation(
    question: str,
    default: bool = False,
    input_fn: Callable[[str], str] = input,
) -> bool:
    try:
        answer = input_fn(question).strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer in {"y", "yes"}
