import argparse
import json
import sys
from typing import Optional

from . import __version__
from .runtime import GreetingHandler
from .server import serve as run_server
from .utils import get_host, get_port


def cmd_serve(args: argparse.Namespace) -> int:
    host = args.host if args.host is not None else get_host()
    try:
        port = args.port if args.port is not None else get_port()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    run_server(host=host, port=port, quiet=args.quiet, log_file=args.log_file)
    return 0


def cmd_greet(args: argparse.Namespace) -> int:
    if args.count < 1:
        print(f"--count must be at least 1, got {args.count}", file=sys.stderr)
        return 2
    handler = GreetingHandler()
    for _ in range(args.count):
        greeting = handler.handle(args.name)
        print(json.dumps(greeting.to_dict()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="greeter", description="Greeting HTTP service")
    p.add_argument("--version", action="version", version=f"greeter {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve", help="Run the HTTP server")
    s.add_argument("--host", default=None, help="Bind address (default: $GREETER_HOST or 127.0.0.1)")
    s.add_argument("--port", type=int, default=None, help="Bind port (default: $GREETER_PORT or 8080)")
    s.add_argument("--quiet", action="store_true", help="Suppress HTTP access logs")
    s.add_argument("--log-file", default=None, help="Append a JSON line per request to this file")
    s.set_defaults(func=cmd_serve)

    g = sub.add_parser("greet", help="Print greetings without starting the server")
    g.add_argument("--name", default=None)
    g.add_argument("--count", type=int, default=1)
    g.set_defaults(func=cmd_greet)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
