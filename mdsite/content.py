from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from pathlib import Path

from .utils import read_source

DATE_FMT = "%Y-%m-%d"
NO_TITLE = "(no title)"
ARTICLE_NAME_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})-(?P<name>.+)\.md$")


@dataclass(frozen=True)
class Article:
    source_name: str
    date: dt.date
    date_str: str
    title: str
    html_path: str


def extract_title(text: str) -> str:
    for line in text.splitlines():
        if line.startswith("# "):
            return line[2:].strip()
    return NO_TITLE


def extract_title_from_file(path: Path) -> str:
    try:
        return extract_title(read_source(path))
    except OSError:
        return NO_TITLE


def parse_article_name(name: str) -> tuple[dt.date, str]:
    """Return the date and date string encoded in an article filename.

    Raises ValueError with a human readable reason when the name does not
    follow ``YYYY-MM-DD-name.md`` or the date is not a real calendar day.
    """
    match = ARTICLE_NAME_RE.match(name)
    if not match:
        raise ValueError(f"{name}: filename does not match YYYY-MM-DD-name.md")
    date_str = match.group("date")
    try:
        date = dt.datetime.strptime(date_str, DATE_FMT).date()
    except ValueError:
        raise ValueError(f"{name}: invalid date {date_str}") from None
    return date, date_str


def load_articles(articles_dir: Path) -> tuple[list[Article], list[str]]:
    articles: list[Article] = []
    warnings: list[str] = []
    try:
        entries = sorted(articles_dir.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        warnings.append(f"cannot read directory {articles_dir}: {exc}")
        return articles, warnings

    for entry in entries:
        if entry.is_dir():
            continue
        name = entry.name
        try:
            date, date_str = parse_article_name(name)
        except ValueError as exc:
            warnings.append(str(exc))
            continue
        articles.append(
            Article(
                source_name=name,
                date=date,
                date_str=date_str,
                title=extract_title_from_file(entry),
                html_path=f"articles/{entry.stem}.html",
            )
        )
    articles.sort(key=lambda a: a.date, reverse=True)
    return articles, warnings
