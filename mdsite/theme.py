from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .utils import read_source

PROPERTIES_HEADER = "# properties"
PROPERTY_RE = re.compile(r"^-\s*(?P<key>[a-z\-]+):\s*(?P<value>.+)$")

# theme file key -> Theme field
THEME_KEYS = {
    "font-family": "font_family",
    "font-color": "font_color",
    "background-color": "background_color",
    "max-content-width": "max_content_width",
    "text-de-emphasize": "text_de_emphasize",
    "article-line-height": "article_line_height",
}

STYLE_TEMPLATE = """
  body {{ font-family: {font_family}; color: {font_color}; background-color: {background_color}; }}
  .container {{ max-width: {max_content_width}; margin: auto; }}
  .container p {{ line-height: {article_line_height} }}
"""


@dataclass(frozen=True)
class Theme:
    font_family: str = ""
    font_color: str = ""
    background_color: str = ""
    max_content_width: str = ""
    text_de_emphasize: str = ""
    article_line_height: str = ""

    def css(self) -> str:
        return STYLE_TEMPLATE.format(
            font_family=self.font_family,
            font_color=self.font_color,
            background_color=self.background_color,
            max_content_width=self.max_content_width,
            article_line_height=self.article_line_height,
        )


def parse_theme(text: str) -> Theme:
    """Read the ``# Properties`` section of a theme document.

    Lines look like ``- font-family: Helvetica``. Unknown keys are ignored
    and a document without the section gives an empty theme.
    """
    values: dict[str, str] = {}
    in_props = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.lower() == PROPERTIES_HEADER:
            in_props = True
            continue
        if not in_props:
            continue
        if stripped.startswith("# "):
            break
        match = PROPERTY_RE.match(stripped)
        if not match:
            continue
        field = THEME_KEYS.get(match.group("key"))
        if field:
            values[field] = match.group("value")
    return Theme(**values)


def load_theme(path: Path) -> Theme:
    return parse_theme(read_source(path))
