from __future__ import annotations

import argparse
import sys
import time
from functools import partial
from pathlib import Path

from .broadcast import RELOAD, Broadcaster
from .config import SitePaths, load_settings
from .pipeline import BuildError, run_generation
from .server import make_server, start_server
from .utils import parse_address
from .watch import Debouncer, Watcher


def execute_once(paths: SitePaths) -> int:
    start = time.perf_counter()
    try:
        count = run_generation(paths)
    except BuildError as exc:
        print(f"generation error: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"generated {count} files in {elapsed:.2f}s")
    return count


def execute_with_broadcast(paths: SitePaths, broadcaster: Broadcaster | None = None) -> bool:
    print("generating...")
    try:
        count = run_generation(paths)
    except BuildError as exc:
        print(f"generation error: {exc}", file=sys.stderr)
        return False
    print(f"generated {count} files")
    if broadcaster is not None:
        broadcaster.publish(RELOAD)
    return True


def watch_and_generate(
    watch_dir: Path,
    paths: SitePaths,
    debounce_ms: int,
    serve_addr: tuple[str, int] | None = None,
) -> None:
    broadcaster = None
    server = None
    if serve_addr is not None:
        broadcaster = Broadcaster()
        server, _ = start_server(*serve_addr, paths.output_dir, broadcaster)

    rebuild = partial(execute_with_broadcast, paths, broadcaster)
    watcher = Watcher(
        watch_dir,
        Debouncer(max(0, debounce_ms) / 1000),
        rebuild,
        ignore=[paths.output_dir],
    )
    print(f"watching {watch_dir}...")
    try:
        try:
            watcher.start()
        except OSError as exc:
            print(f"unable to watch {watch_dir}: {exc}", file=sys.stderr)
            sys.exit(1)
        watcher.debouncer.run(rebuild)
        watcher.run_forever()
    except KeyboardInterrupt:
        print("\nstopped.")
    finally:
        watcher.stop()
        if server is not None:
            server.shutdown()
            server.server_close()


def serve(paths: SitePaths, serve_addr: tuple[str, int]) -> None:
    execute_with_broadcast(paths)
    host, port = serve_addr
    server = make_server(host, port, paths.output_dir, Broadcaster())
    print(f"serving on {host}:{server.server_address[1]}...")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nstopped.")
    finally:
        server.server_close()


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    settings = load_settings(Path(pre_args.config))

    parser = argparse.ArgumentParser(description="Markdown blog generator with live reload.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "-watch",
        "--watch",
        default="",
        metavar="DIR",
        help="Directory to watch; rebuild the site whenever it changes.",
    )
    parser.add_argument(
        "-serve",
        "--serve",
        nargs="?",
        const=settings.serve,
        default=None,
        metavar="HOST:PORT",
        help=f"Serve the output with live reload (bare flag: {settings.serve}).",
    )
    parser.add_argument("--blog", default=settings.blog, help="Blog source directory.")
    parser.add_argument("--output", default=settings.output, help="Output directory.")
    parser.add_argument("--theme", default=settings.theme, help="Theme name under <blog>/themes.")
    parser.add_argument(
        "--debounce-ms",
        default=settings.debounce_ms,
        type=int,
        help="Quiet period before a watched change triggers a rebuild.",
    )
    args = parser.parse_args(argv)

    paths = SitePaths(blog_dir=Path(args.blog), output_dir=Path(args.output), theme=args.theme)
    serve_addr = None
    if args.serve is not None:
        try:
            serve_addr = parse_address(args.serve)
        except ValueError as exc:
            parser.error(str(exc))

    if args.watch:
        watch_and_generate(Path(args.watch), paths, args.debounce_ms, serve_addr)
        return
    if serve_addr is not None:
        serve(paths, serve_addr)
        return
    execute_once(paths)
