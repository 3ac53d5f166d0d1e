from __future__ import annotations

import sys
from collections.abc import Sequence

from .config import SitePaths
from .content import Article, extract_title, load_articles
from .render import build_style, render_index, render_markdown, render_page
from .theme import load_theme
from .utils import read_source, write_text


class BuildError(Exception):
    """A build could not produce the site.

    ``written`` counts the HTML files that did reach disk before the failure.
    """

    def __init__(self, message: str, written: int = 0) -> None:
        super().__init__(message)
        self.written = written


def write_articles(paths: SitePaths, articles: Sequence[Article], style: str) -> int:
    count = 0
    for article in articles:
        try:
            source = read_source(paths.articles_dir / article.source_name)
        except OSError:
            continue
        page = render_page(article.title, style, render_markdown(source))
        try:
            write_text(paths.output_dir / article.html_path, page)
        except OSError:
            continue
        count += 1
    return count


def run_generation(paths: SitePaths | None = None) -> int:
    """Build the whole site and return the number of HTML files written."""
    paths = paths or SitePaths()
    try:
        theme = load_theme(paths.theme_file)
    except OSError as exc:
        raise BuildError(f"unable to load theme: {exc}") from exc
    style = build_style(theme.css())

    try:
        paths.articles_output.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(f"unable to create output directory: {exc}") from exc

    try:
        index_source = read_source(paths.index_source)
    except OSError as exc:
        raise BuildError(f"unable to read index: {exc}") from exc
    index_title = extract_title(index_source)
    index_html = render_markdown(index_source)

    articles, warnings = load_articles(paths.articles_dir)
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)

    article_count = write_articles(paths, articles, style)

    page = render_index(index_title, style, index_html, articles, theme.text_de_emphasize)
    try:
        write_text(paths.index_output, page)
    except OSError as exc:
        raise BuildError(f"unable to write index: {exc}", written=article_count) from exc
    return article_count + 1
