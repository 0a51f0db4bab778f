"""Popup: centering/clipping decorator for any Component.

Holds one component behind the Component interface and forwards
handle_key/update; render() frames the component in a bordered panel. The
Textual overlay asks region() where to paint it: a rectangle centered on the
full terminal, sized as a percentage of it.

A wrapped component may expose `panel_title` / `panel_style` attributes to
override the popup's defaults (the message dialog does, to switch between
info and error framing).
"""

from __future__ import annotations

from typing import NamedTuple

from rich import box
from rich.console import RenderableType
from rich.panel import Panel

from rq_console.tui.protocols import Component, HandleResult


class PopupRegion(NamedTuple):
    x: int
    y: int
    width: int
    height: int


class Popup:
    """Modal wrapper around a component.

    Args:
        component: anything implementing handle_key/update/render.
        title: border title.
        width_pct: width as a percentage of the terminal width.
        height_pct: height as a percentage of the terminal height.
        min_height: rows reserved even on short terminals (border included).
        border_style: Rich style for the border.
        legend: key hints drawn into the bottom border.
    """

    def __init__(
        self,
        component: Component,
        *,
        title: str = "",
        width_pct: int = 40,
        height_pct: int = 25,
        min_height: int = 3,
        border_style: str = "",
        legend: str = "",
    ) -> None:
        self.component = component
        self.title = title
        self.width_pct = width_pct
        self.height_pct = height_pct
        self.min_height = min_height
        self.border_style = border_style
        self.legend = legend

    def handle_key(self, key: str, character: str | None) -> HandleResult:
        return self.component.handle_key(key, character)

    def update(self) -> None:
        self.component.update()

    def region(self, width: int, height: int) -> PopupRegion:
        """Centered rectangle inside a `width` x `height` area."""
        w = min(width, max(1, width * self.width_pct // 100))
        h = min(height, max(self.min_height, height * self.height_pct // 100))
        return PopupRegion(x=(width - w) // 2, y=(height - h) // 2, width=w, height=h)

    def render(self, height: int) -> RenderableType:
        title = getattr(self.component, "panel_title", None) or self.title
        style = getattr(self.component, "panel_style", None) or self.border_style
        return Panel(
            self.component.render(max(0, height - 2)),
            title=title or None,
            subtitle=self.legend or None,
            subtitle_align="right",
            border_style=style,
            box=box.SQUARE,
            height=height if height > 0 else None,
        )
