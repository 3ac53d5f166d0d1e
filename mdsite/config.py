from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from .utils import parse_int

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

DEFAULT_BLOG_DIR = "blog"
DEFAULT_OUTPUT_DIR = "public"
DEFAULT_THEME = "default"
DEFAULT_DEBOUNCE_MS = 500
DEFAULT_SERVE_ADDR = "localhost:8888"


@dataclass(frozen=True)
class SitePaths:
    blog_dir: Path = Path(DEFAULT_BLOG_DIR)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    theme: str = DEFAULT_THEME

    @property
    def index_source(self) -> Path:
        return self.blog_dir / "index.md"

    @property
    def articles_dir(self) -> Path:
        return self.blog_dir / "articles"

    @property
    def theme_file(self) -> Path:
        return self.blog_dir / "themes" / f"{self.theme}.md"

    @property
    def articles_output(self) -> Path:
        return self.output_dir / "articles"

    @property
    def index_output(self) -> Path:
        return self.output_dir / "index.html"


@dataclass(frozen=True)
class SiteSettings:
    blog: str = DEFAULT_BLOG_DIR
    output: str = DEFAULT_OUTPUT_DIR
    theme: str = DEFAULT_THEME
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    serve: str = DEFAULT_SERVE_ADDR


STRING_KEYS = ("blog", "output", "theme", "serve")
CONFIG_KEYS = {*STRING_KEYS, "debounce_ms"}


def fail(message: str) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            fail("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            fail(f"Invalid TOML in config file {path}: {exc}")
    elif suffix in {".yml", ".yaml"}:
        if yaml is None:
            fail("YAML config requires PyYAML.")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            fail(f"Invalid YAML in config file {path}: {exc}")
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            fail(f"Invalid JSON in config file {path}: {exc}")
    if not isinstance(data, dict):
        fail(f"Config file must be a mapping: {path}")
    return data


def site_settings(config: dict, source: Path) -> SiteSettings:
    """Validate a loaded config mapping against the keys this generator reads."""
    unknown = sorted(str(key) for key in config if key not in CONFIG_KEYS)
    if unknown:
        print(f"Ignoring unknown keys in config file {source}: {', '.join(unknown)}", file=sys.stderr)

    values: dict[str, object] = {}
    for key in STRING_KEYS:
        value = config.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or not value.strip():
            fail(f"Config key '{key}' must be a non-empty string: {source}")
        values[key] = value.strip()

    if config.get("debounce_ms") is not None:
        debounce_ms = parse_int(config["debounce_ms"], -1)
        if debounce_ms < 0 or isinstance(config["debounce_ms"], bool):
            fail(f"Config key 'debounce_ms' must be a non-negative integer: {source}")
        values["debounce_ms"] = debounce_ms
    return SiteSettings(**values)


def load_settings(path: Path) -> SiteSettings:
    return site_settings(load_config(path), path)
