#!/usr/bin/env python3
"""Launch the debugger web server with the built-in demo page."""

import argparse
import logging
import sys

from .config import SUPPRESSING_OBJECT_TYPES, load_config
from .debugger_server import ROUTE_PREFIX, DebuggerServer
from .demo import render_demo


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Serve the renderlens demo page with the template debugger"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5175,
        help="Port to listen on (default: 5175)"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--profile",
        choices=sorted(SUPPRESSING_OBJECT_TYPES),
        default=None,
        help="Object type naming profile (default: $RENDERLENS_PROFILE or neos)"
    )
    return parser.parse_args(argv)


def _print_banner(args, config, *, out) -> None:
    print("=" * 60, file=out)
    print("renderlens - Template Rendering Debugger", file=out)
    print("=" * 60, file=out)
    print(f"\nStarting server on {args.host}:{args.port} (profile: {config.profile})...", file=out)
    print("\nNote: If port is occupied, a free port will be auto-selected.", file=out)
    print("      Port will be written to: ~/.renderlens/port", file=out)
    print("\nEndpoints:", file=out)
    print("  GET    /                                  - Instrumented demo page", file=out)
    print(f"  GET    {ROUTE_PREFIX}/debugger               - Observer view", file=out)
    print(f"  GET    {ROUTE_PREFIX}/snippet.js             - Page script", file=out)
    print(f"  POST   {ROUTE_PREFIX}/api/format-output      - Highlight captured output", file=out)
    print("\nPress Ctrl+C to stop the server", file=out)
    print("=" * 60, file=out)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)
    out = sys.stdout

    try:
        config = load_config(args.profile)
    except ValueError as e:
        print(f"\n✗ Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    _print_banner(args, config, out=out)

    try:
        server = DebuggerServer(render_demo, config=config, port=args.port, host=args.host)
        print("\n✓ Server is starting...\n", file=out)
        server.start()
    except KeyboardInterrupt:
        print("\n\n✓ Server stopped by user", file=out)
        sys.exit(0)
    except OSError as e:
        print(f"\n✗ Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
