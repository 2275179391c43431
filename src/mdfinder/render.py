"""Turn a section's markdown into terminal text with labelled code block borders."""

from io import StringIO
from typing import List

from rich.console import Console, ConsoleOptions, RenderResult
from rich.markdown import CodeBlock as RichCodeBlock
from rich.markdown import Markdown
from rich.text import Text

from .config import Config
from .models import Section

TAB_SPACES = 4
DEFAULT_WIDTH = 80


class _BorderedCodeBlock(RichCodeBlock):
    """Fenced code with placeholder lines above and below."""

    prefix = ""
    suffix = ""

    @classmethod
    def create(cls, markdown: "SnippetMarkdown", token) -> "_BorderedCodeBlock":
        block = super().create(markdown, token)
        block.prefix = markdown.code_block_prefix
        block.suffix = markdown.code_block_suffix
        return block

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Text(self.prefix)
        yield from super().__rich_console__(console, options)
        yield Text(self.suffix)


class SnippetMarkdown(Markdown):
    elements = {**Markdown.elements, "fence": _BorderedCodeBlock}

    def __init__(self, markup: str, config: Config):
        self.code_block_prefix = config.code_block_prefix
        self.code_block_suffix = config.code_block_suffix
        super().__init__(markup, code_theme=config.theme)


def pad_border_with_title(title: str, config: Config) -> str:
    """Centre ``title`` in a border of the configured length."""
    length = config.code_block_border_length
    max_title_len = length - 4
    if max_title_len <= 0:
        return config.border_default

    title = title[:max_title_len]
    padding = length - len(title) - 2
    left = padding // 2
    right = padding - left
    char = config.code_block_border_padding
    return f"{char * left} {title} {char * right}"


def code_block_prefixes(section: Section, config: Config) -> List[str]:
    """One opening border per code block, in source order."""
    keys = iter(config.copy_content_keys)
    prefixes = []
    for block in section.code_blocks:
        if block.copyable:
            key = next(keys, None)
            if key is None:
                prefixes.append(config.border_default)
            else:
                label = config.code_block_title_copy.replace("{key}", key.upper())
                prefixes.append(pad_border_with_title(label, config))
        elif block.title:
            prefixes.append(pad_border_with_title(block.title, config))
        else:
            prefixes.append(config.border_default)
    return prefixes


def rewrite_code_block_borders(text: str, section: Section, config: Config) -> str:
    """Swap placeholder lines for the computed borders; nothing else changes."""
    for prefix in code_block_prefixes(section, config):
        text = text.replace(config.code_block_prefix, prefix, 1)
    return text.replace(config.code_block_suffix, config.border_default)


def line_numbers(line_count: int) -> str:
    """Gutter for ``line_count`` rendered lines: numbers, then a tilde."""
    numbers = "".join(f"{i:3d}\n" for i in range(1, line_count))
    return numbers + "  ~\n"


class ContentRenderer:
    """Markdown to ANSI text, with tabs expanded and code borders labelled."""

    def __init__(self, config: Config, width: int = DEFAULT_WIDTH):
        self.config = config
        self.width = max(width, config.code_block_border_length)

    def _markdown_to_ansi(self, markup: str) -> str:
        buffer = StringIO()
        console = Console(
            file=buffer,
            width=self.width,
            force_terminal=True,
            color_system="256",
            legacy_windows=False,
        )
        console.print(SnippetMarkdown(markup, self.config))
        return buffer.getvalue()

    def render(self, section: Section) -> str:
        text = self._markdown_to_ansi(section.content)
        if text.startswith("\n"):
            text = text[1:]
        text = text.replace("\t", " " * TAB_SPACES)
        return rewrite_code_block_borders(text, section, self.config)

    def render_text(self, section: Section) -> Text:
        return Text.from_ansi(self.render(section))
