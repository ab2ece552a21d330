"""CLI for inspecting named routes and exporting the client route manifest."""
import argparse
import json
import sys
from pathlib import Path

from app.core.config import get_settings
from app.core.routing import route_manifest

DEFAULT_OUTPUT = "frontend/js/ziggy.js"


def _load_app():
    from app.main import app

    return app


def cmd_list(args, out=None):
    """Print the named routes as a table."""
    out = out or sys.stdout
    manifest = route_manifest(_load_app(), args.url)
    rows = [
        ("|".join(r["methods"]), "/" + r["uri"].lstrip("/"), name)
        for name, r in manifest["routes"].items()
    ]
    if not rows:
        print("No named routes.", file=out)
        return 0
    widths = [max(len(row[i]) for row in rows) for i in range(2)]
    for methods, uri, name in rows:
        print(f"{methods.ljust(widths[0])}  {uri.ljust(widths[1])}  {name}", file=out)
    return 0


def render_manifest(manifest: dict, output: Path) -> str:
    body = json.dumps(manifest, indent=4)
    if output.suffix == ".json":
        return body + "\n"
    return f"const Ziggy = {body};\nexport {{ Ziggy }};\n"


def cmd_generate(args, out=None):
    """Write the route manifest for the client build."""
    out = out or sys.stdout
    output = get_settings().resolve_path(args.output)
    manifest = route_manifest(_load_app(), args.url)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_manifest(manifest, output), encoding="utf-8")
    print(f"Route manifest written to {output} ({len(manifest['routes'])} routes)", file=out)
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="routes")
    p.add_argument("--url", default=None, help="Base URL (defaults to APP_URL)")
    sub = p.add_subparsers(dest="cmd")

    sub.add_parser("list", help="List named routes")

    gen = sub.add_parser("generate", help="Write the client route manifest")
    gen.add_argument("--output", "-o", default=DEFAULT_OUTPUT, help="Output file (.js or .json)")

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "list":
        return cmd_list(args)
    if args.cmd == "generate":
        return cmd_generate(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
