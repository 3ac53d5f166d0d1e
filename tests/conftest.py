from __future__ import annotations

from pathlib import Path

import pytest

from mdsite.config import SitePaths

DEFAULT_THEME = """# Default theme

Some notes about the theme.

# Properties

- font-family: Helvetica, sans-serif
- font-color: #333333
- background-color: #fafafa
- max-content-width: 720px
- text-de-emphasize: #676767
- article-line-height: 1.5

# Changelog

- font-color: #ff0000
"""


@pytest.fixture
def site(tmp_path: Path) -> SitePaths:
    """A minimal blog tree under tmp_path with a theme and an index page."""
    paths = SitePaths(blog_dir=tmp_path / "blog", output_dir=tmp_path / "public")
    paths.articles_dir.mkdir(parents=True)
    paths.theme_file.parent.mkdir(parents=True)
    paths.theme_file.write_text(DEFAULT_THEME, encoding="utf-8")
    paths.index_source.write_text("# Hello\n\nWelcome to the blog.\n", encoding="utf-8")
    return paths


def write_article(paths: SitePaths, name: str, text: str) -> Path:
    path = paths.articles_dir / name
    path.write_text(text, encoding="utf-8")
    return path
