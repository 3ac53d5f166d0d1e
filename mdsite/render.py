from __future__ import annotations

import html
from collections.abc import Sequence

import markdown
from pygments.formatters import HtmlFormatter

from .content import Article

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False, "css_class": "codehilite"}}
PYGMENTS_CSS = HtmlFormatter(cssclass="codehilite").get_style_defs(".codehilite")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{{title}}</title>
  <style>
{{style}}
  </style>
</head>
<body>
  <div class="container">
{{content}}
  </div>
</body>
</html>"""

RELOAD_SCRIPT = """<script>
  var es = new EventSource('/_sse');
  es.onmessage = function(e) { if (e.data === 'reload') window.location.reload(); };
</script>"""


def render_markdown(text: str) -> str:
    return markdown.markdown(
        text,
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )


def build_style(theme_css: str) -> str:
    return f"{theme_css}\n{PYGMENTS_CSS}"


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def render_page(title: str, style: str, body: str) -> str:
    return render_template(PAGE_TEMPLATE, title=html.escape(title), style=style, content=body)


def build_article_list(articles: Sequence[Article], date_color: str = "") -> str:
    if not articles:
        return ""
    rows = ["<h2>Articles</h2>", "<ul>"]
    for article in articles:
        rows.append(
            f'  <li><span style="color: {html.escape(date_color)}">{article.date_str}</span> '
            f'<a href="{html.escape(article.html_path)}">{html.escape(article.title)}</a></li>'
        )
    rows.append("</ul>")
    return "\n".join(rows) + "\n"


def render_index(
    title: str, style: str, index_html: str, articles: Sequence[Article], date_color: str = ""
) -> str:
    body = f"{index_html}\n{build_article_list(articles, date_color)}"
    return render_page(title, style, body)


def inject_reload_script(page: bytes) -> bytes:
    return page.replace(b"</head>", RELOAD_SCRIPT.encode("utf-8") + b"</head>", 1)
