from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.manifest import (
    DevelopmentLoader,
    Environment,
    ManifestError,
    ProductionLoader,
    current_env,
    from_settings,
)
from core.settings import get_settings


def _loader_path(settings) -> Path:
    if current_env(settings) is Environment.PRODUCTION:
        return ProductionLoader(settings.app_name, root=settings.install_root).manifest_path()
    return DevelopmentLoader(settings.app_name).manifest_path()


def cmd_env(_: argparse.Namespace) -> int:
    settings = get_settings()
    print(current_env(settings).value)
    return 0


def cmd_show(_: argparse.Namespace) -> int:
    manifest = from_settings(get_settings()).read()
    data = {key: entry._asdict() for key, entry in manifest.items()}
    print(json.dumps(data, ensure_ascii=False, indent=2))
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    key = args.key
    if not key:
        print("KEY is required", file=sys.stderr)
        return 2
    cache = from_settings(get_settings())
    print("file:", cache.resolve_file(key))
    print("css:", cache.resolve_css(key))
    for imported in cache.resolve_imports(key):
        print("import:", imported)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    try:
        path = Path(args.path) if args.path else _loader_path(get_settings())
        manifest = DevelopmentLoader(path=path).load()
    except ManifestError as exc:
        print(f"Manifest invalid: {exc}", file=sys.stderr)
        return 1
    print(f"Manifest OK: {len(manifest)} entries at {path}")
    return 0


def cmd_digest(args: argparse.Namespace) -> int:
    from scripts import build_static

    source = Path(args.source) if args.source else build_static.SOURCE_DIR
    out = Path(args.out) if args.out else build_static.DIST_DIR
    if not source.is_dir():
        print(f"Source directory not found: {source}", file=sys.stderr)
        return 2
    build_static.build(source, out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Vite manifest tooling")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("env", help="Print the detected environment")
    p.set_defaults(func=cmd_env)

    p = sub.add_parser("show", help="Dump the manifest as loaded for the current environment")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("resolve", help="Resolve a logical entry key")
    p.add_argument("key")
    p.set_defaults(func=cmd_resolve)

    p = sub.add_parser("check", help="Strictly validate the manifest file")
    p.add_argument("--path", help="Manifest path (defaults to the configured location)")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("digest", help="Fingerprint static sources and write the manifest")
    p.add_argument("--source", help="Source directory (default: ./assets)")
    p.add_argument("--out", help="Output directory (default: app/static/assets)")
    p.set_defaults(func=cmd_digest)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
