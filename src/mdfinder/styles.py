"""rich styles derived from the configured colors."""

from dataclasses import dataclass

from rich.style import Style

from .config import Config
from .models import FocusState


def color(value: str) -> str:
    """Config colors are ANSI 256 numbers or any rich color name."""
    value = value.strip()
    return f"color({value})" if value.isdigit() else value


@dataclass(frozen=True)
class Styles:
    focused_bar: Style
    blurred_bar: Style
    copied_bar: Style
    selected_item: Style
    unselected_item: Style
    copied_item: Style
    subtitle: Style
    line_number: Style

    @classmethod
    def from_config(cls, config: Config) -> "Styles":
        return cls(
            focused_bar=Style(color=color(config.focused_bar_fg_color), bgcolor=color(config.focused_bar_bg_color), bold=True),
            blurred_bar=Style(color=color(config.blurred_bar_fg_color), bgcolor=color(config.blurred_bar_bg_color)),
            copied_bar=Style(color=color(config.copied_bar_fg_color), bgcolor=color(config.copied_bar_bg_color), bold=True),
            selected_item=Style(color=color(config.selected_item_fg_color)),
            unselected_item=Style(color=color(config.unselected_item_fg_color)),
            copied_item=Style(color=color(config.copied_item_fg_color)),
            subtitle=Style(color=color(config.content_line_number_fg_color)),
            line_number=Style(color=color(config.content_line_number_fg_color)),
        )

    def bar(self, focus: FocusState) -> Style:
        if focus is FocusState.COPIED:
            return self.copied_bar
        if focus is FocusState.FOCUSED:
            return self.focused_bar
        return self.blurred_bar

    def item(self, selected: bool, focus: FocusState) -> Style:
        if not selected:
            return self.unselected_item
        if focus is FocusState.COPIED:
            return self.copied_item
        return self.selected_item
