"""Split snippet markdown into sections and extract annotated code blocks."""

from typing import Dict, List, Tuple

from markdown_it import MarkdownIt

from .models import CodeBlock, Section

SECTION_DELIMITER = "\n---\n"
QUOTES = "\"'"

_md = MarkdownIt("commonmark")


def split_sections(body: str) -> List[str]:
    """Cut a snippet body on lines consisting solely of ``---``."""
    return [chunk.strip() for chunk in body.strip().split(SECTION_DELIMITER)]


def parse_code_block_info(info: str) -> Tuple[str, Dict[str, str]]:
    """Decode a fence info string such as ``bash {copyable title="Run it"}``.

    Returns the language and a metadata mapping. Bare keys map to ``"true"``,
    ``key=value`` and quoted values are kept as given. Never raises; anything
    that cannot form a key is dropped.
    """
    meta: Dict[str, str] = {}

    info = info.strip()
    if not info:
        return "", meta

    language, _, rest = info.partition(" ")
    if not rest:
        return language, meta

    rest = rest.strip().strip("{}")

    key = ""
    buf: List[str] = []
    in_quote = False
    quote_char = ""
    is_key = True

    for ch in rest + " ":
        if ch in QUOTES:
            if not in_quote:
                in_quote = True
                quote_char = ch
            elif ch == quote_char:
                in_quote = False
            else:
                buf.append(ch)
        elif ch == "=" and is_key and not in_quote:
            key = "".join(buf).strip()
            buf = []
            is_key = False
        elif ch == " " and not in_quote:
            if not is_key:
                if key:
                    meta[key] = "".join(buf).strip()
            elif buf:
                meta["".join(buf).strip()] = "true"
            buf = []
            is_key = True
        else:
            buf.append(ch)

    return language, meta


def _inline_text(token) -> str:
    children = token.children or []
    return "".join(child.content for child in children if child.type in ("text", "code_inline"))


def parse_section(chunk: str, folder: str = "", file: str = "") -> Section:
    """Build one section: first heading as title, every fenced block in order."""
    section = Section(folder=folder, file=file, content=chunk)

    tokens = _md.parse(chunk)
    title_found = False
    for i, token in enumerate(tokens):
        if token.type == "heading_open" and not title_found:
            if i + 1 < len(tokens) and tokens[i + 1].type == "inline":
                section.title = _inline_text(tokens[i + 1])
            title_found = True
        elif token.type == "fence":
            language, meta = parse_code_block_info(token.info)
            content = token.content
            if content.endswith("\n"):
                content = content[:-1]
            section.code_blocks.append(CodeBlock(content=content, language=language, meta=meta))

    return section


def parse_sections(body: str, folder: str = "", file: str = "") -> List[Section]:
    """Parse a whole snippet body. Always yields at least one section."""
    return [parse_section(chunk, folder, file) for chunk in split_sections(body)]
