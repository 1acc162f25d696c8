"""CLI for symark - a static site generator for block-structured notes."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from . import __version__
from .export.site import SiteExporter
from .graph import build_link_graph, graph_to_dot
from .lint import lint_index
from .render import render_note
from .runtime import build_runtime


def format_elapsed(seconds: float) -> str:
    """Milliseconds under a second, else seconds with two decimals."""
    if seconds < 1:
        return f"{int(seconds * 1000)} ms"
    return f"{seconds:.2f} s"


def export_site(rt: Any) -> int:
    paths = rt.config.paths
    exporter = SiteExporter(
        rt.index,
        paths.output,
        site=rt.config.site,
        storage=rt.storage,
        template_dir=paths.template,
        graph=rt.config.graph.enabled,
    )
    return exporter.export_all()


def cmd_build(args: argparse.Namespace, rt: Any) -> int:
    """Generate the whole site."""
    start = time.perf_counter()
    paths = rt.config.paths
    pages = export_site(rt)

    if rt.vault.failed:
        print(f"Skipped {len(rt.vault.failed)} unreadable document(s)", file=sys.stderr)
    if not args.quiet:
        print(f"✓ Built {pages} pages in {format_elapsed(time.perf_counter() - start)}")
        print(f"Output written to {paths.output}")
    return 0


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Print the rendered HTML of one note."""
    note = rt.index.get(args.id)
    if note is None:
        print(f"Error: Note {args.id} not found", file=sys.stderr)
        return 1
    content, _ = render_note(note, rt.index)
    sys.stdout.write(content)
    return 0


def cmd_toc(args: argparse.Namespace, rt: Any) -> int:
    """Print the table of contents of one note."""
    note = rt.index.get(args.id)
    if note is None:
        print(f"Error: Note {args.id} not found", file=sys.stderr)
        return 1
    _, toc = render_note(note, rt.index)
    sys.stdout.write(toc)
    return 0


def cmd_graph(args: argparse.Namespace, rt: Any) -> int:
    """Export graph data."""
    graph = build_link_graph(rt.index)

    if getattr(args, 'dot', False):
        print(graph_to_dot(graph))
    else:
        print(json.dumps(graph.to_dict(), indent=2))

    return 0


def cmd_ls(args: argparse.Namespace, rt: Any) -> int:
    """List notes, optionally only those with a tag."""
    if args.tag:
        notes = rt.index.tagged(args.tag)
    else:
        notes = [rt.index[nid] for nid in sorted(rt.index)]

    if args.json:
        output = [{"id": n.id, "title": n.title, "tags": n.tag_list} for n in notes]
        print(json.dumps(output, indent=2))
    else:
        for n in notes:
            print(f"{n.id}\t{n.title}")

    return 0


def cmd_lint(args: argparse.Namespace, rt: Any) -> int:
    """Report unresolved block references and transclusions."""
    all_findings = list(lint_index(rt.index))

    if args.json:
        output = [
            {
                "note_id": nid,
                "severity": f.severity,
                "message": f.message,
                "block_id": f.block_id or None,
            }
            for nid, f in all_findings
        ]
        print(json.dumps(output, indent=2))
    else:
        for nid, f in all_findings:
            if not args.quiet:
                where = f"{nid}#{f.block_id}" if f.block_id else nid
                print(f"{where}: [{f.severity}] {f.message}")

    return 1 if any(f.severity == "error" for _, f in all_findings) else 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Rebuild the site whenever the input tree changes."""
    try:
        from .watch import watch_site
    except ImportError as e:
        print(
            "Error: watchdog library not installed. "
            "Install with: pip install symark[watch]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    paths = rt.config.paths
    state = {"rt": rt}

    def rebuild() -> int:
        # the first build reuses the notes loaded at startup
        current = state.pop("rt", None) or build_runtime(
            input_path=paths.input,
            output_path=paths.output,
            template_path=paths.template,
            config_path=rt.config.source,
        )
        return export_site(current)

    return watch_site(
        input_path=paths.input,
        rebuild=rebuild,
        output_path=paths.output,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
    )


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local preview API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install symark[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    # Determine token
    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=getattr(args, 'cors', False))

    host = getattr(args, 'host', '127.0.0.1')
    port = getattr(args, 'port', 8765)

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")

    return 0


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="symark", description="Static HTML site generator for .sy notes"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/symark.toml, input/symark.toml)",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Directory holding the .sy documents (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress and unresolved references"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # build command
    parser_build = subparsers.add_parser("build", help="Generate the static site")
    parser_build.add_argument(
        "--output", type=Path, default=None,
        help="Output directory, recreated on each build (overrides config)"
    )
    parser_build.add_argument(
        "--template", type=Path, default=None,
        help="Template directory with page.html, graph.html, styles.css"
    )

    # render command
    parser_render = subparsers.add_parser("render", help="Print one note as HTML")
    parser_render.add_argument("id", help="Note ID")

    # toc command
    parser_toc = subparsers.add_parser("toc", help="Print a note's table of contents")
    parser_toc.add_argument("id", help="Note ID")

    # graph command
    parser_graph = subparsers.add_parser("graph", help="Export link graph data")
    parser_graph.add_argument(
        "--dot", action="store_true", help="Output in DOT format for Graphviz"
    )

    # ls command
    parser_ls = subparsers.add_parser("ls", help="List notes")
    parser_ls.add_argument("--tag", help="Only notes with this tag")

    # lint command
    subparsers.add_parser("lint", help="Find unresolved references and transclusions")

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Rebuild the site on every change")
    parser_watch.add_argument(
        "--output", type=Path, default=None,
        help="Output directory, recreated on each build (overrides config)"
    )
    parser_watch.add_argument(
        "--template", type=Path, default=None,
        help="Template directory with page.html, graph.html, styles.css"
    )
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=300,
        help="Debounce window in milliseconds (default: 300)"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local preview API server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8765,
        help="Port to bind to (default: 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    handlers = {
        "build": cmd_build,
        "render": cmd_render,
        "toc": cmd_toc,
        "graph": cmd_graph,
        "ls": cmd_ls,
        "lint": cmd_lint,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    try:
        rt = build_runtime(
            input_path=args.input,
            output_path=getattr(args, 'output', None),
            template_path=getattr(args, 'template', None),
            config_path=args.config,
        )
        exit_code = handler(args, rt)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
