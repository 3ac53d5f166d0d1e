import pytest

from mdsite import content, pipeline
from mdsite.pipeline import BuildError, run_generation

from conftest import write_article


def test_end_to_end_single_article(site):
    write_article(site, "2024-01-01-first.md", "# First Post\n\nHello there.\n")

    count = run_generation(site)

    assert count == 2
    index = site.index_output.read_text(encoding="utf-8")
    assert "<title>Hello</title>" in index
    assert '<a href="articles/2024-01-01-first.html">First Post</a>' in index
    assert "<h1>Hello</h1>" in index
    article = (site.output_dir / "articles" / "2024-01-01-first.html").read_text(encoding="utf-8")
    assert "<title>First Post</title>" in article
    assert "<p>Hello there.</p>" in article
    assert "font-family: Helvetica, sans-serif;" in article


def test_undated_article_is_warned_and_skipped(site, capsys):
    write_article(site, "2024-01-01-first.md", "# First Post\n")
    write_article(site, "notes.md", "# Notes\n")

    count = run_generation(site)

    assert count == 2
    err = capsys.readouterr().err
    assert "warning: notes.md: filename does not match YYYY-MM-DD-name.md" in err
    index = site.index_output.read_text(encoding="utf-8")
    assert "Notes" not in index
    assert not (site.output_dir / "articles" / "notes.html").exists()


def test_empty_article_directory_builds_index_only(site):
    count = run_generation(site)

    assert count == 1
    assert "<ul>" not in site.index_output.read_text(encoding="utf-8")


def test_missing_article_directory_still_builds(site, capsys):
    site.articles_dir.rmdir()

    assert run_generation(site) == 1
    assert "warning: cannot read directory" in capsys.readouterr().err


def test_count_grows_with_each_valid_article(site):
    write_article(site, "2024-01-01-first.md", "# First\n")
    before = run_generation(site)

    write_article(site, "2024-01-02-second.md", "# Second\n")
    after = run_generation(site)

    assert after == before + 1


def test_index_lists_newest_first(site):
    write_article(site, "2023-05-01-older.md", "# Older\n")
    write_article(site, "2024-05-01-newer.md", "# Newer\n")

    run_generation(site)

    index = site.index_output.read_text(encoding="utf-8")
    assert index.index("Newer") < index.index("Older")
    assert '<span style="color: #676767">2024-05-01</span>' in index


def test_rebuild_is_idempotent(site):
    write_article(site, "2024-01-01-first.md", "# First Post\n\n```python\nprint(1)\n```\n")

    run_generation(site)
    first = site.index_output.read_bytes()
    run_generation(site)

    assert site.index_output.read_bytes() == first


def test_missing_theme_is_fatal(site):
    site.theme_file.unlink()

    with pytest.raises(BuildError, match="unable to load theme"):
        run_generation(site)
    assert not site.index_output.exists()


def test_missing_index_source_is_fatal(site):
    site.index_source.unlink()

    with pytest.raises(BuildError, match="unable to read index"):
        run_generation(site)


def test_uncreatable_output_directory_is_fatal(site):
    site.output_dir.write_text("not a directory", encoding="utf-8")

    with pytest.raises(BuildError, match="unable to create output directory"):
        run_generation(site)


def test_unwritable_article_is_skipped(site):
    write_article(site, "2024-01-01-first.md", "# First\n")
    write_article(site, "2024-01-02-second.md", "# Second\n")
    # a directory where the page should go makes that single write fail
    (site.output_dir / "articles" / "2024-01-02-second.html").mkdir(parents=True)

    count = run_generation(site)

    assert count == 2
    assert (site.output_dir / "articles" / "2024-01-01-first.html").is_file()
    assert "Second" in site.index_output.read_text(encoding="utf-8")


def test_index_write_failure_reports_article_count(site):
    write_article(site, "2024-01-01-first.md", "# First\n")
    site.index_output.parent.mkdir(parents=True)
    site.index_output.mkdir()

    with pytest.raises(BuildError) as excinfo:
        run_generation(site)

    assert excinfo.value.written == 1
    assert str(excinfo.value).startswith("unable to write index")


def test_unreadable_article_gets_placeholder_and_is_skipped(site, monkeypatch):
    secret = write_article(site, "2024-01-01-secret.md", "# Secret\n")
    write_article(site, "2024-01-02-open.md", "# Open\n")
    real_read_source = content.read_source

    def read_source(path):
        if path == secret:
            raise PermissionError(13, "Permission denied", str(path))
        return real_read_source(path)

    monkeypatch.setattr(content, "read_source", read_source)
    monkeypatch.setattr(pipeline, "read_source", read_source)

    count = run_generation(site)

    assert count == 2
    index = site.index_output.read_text(encoding="utf-8")
    assert '<a href="articles/2024-01-01-secret.html">(no title)</a>' in index
    assert "Open" in index
    assert not (site.output_dir / "articles" / "2024-01-01-secret.html").exists()
