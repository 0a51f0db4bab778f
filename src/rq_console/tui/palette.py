"""Semantic colors for the console.

// [LAW:one-source-of-truth] Every style string used by renderers lives here.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Palette:
    focus: str = "blue"
    selected: str = "bold green"
    method: str = "green"
    request_body: str = "rgb(246,69,42)"
    header_key: str = "blue"
    placeholder: str = "yellow"
    info: str = "green"
    error: str = "red"
    success: str = "green"
    redirect: str = "yellow"
    legend_key: str = "bold cyan"
    legend_text: str = "dim"


PALETTE = Palette()


def status_style(status: int) -> str:
    """2xx green, 3xx yellow, 4xx/5xx red, anything else unstyled."""
    category = status // 100
    if category == 2:
        return PALETTE.success
    if category == 3:
        return PALETTE.redirect
    if category in (4, 5):
        return PALETTE.error
    return ""
