import argparse
import logging
import sys

from .client import SolvedClient
from .errors import SolvedClientError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="solvedclient", description="Query or update a solved server")
    ap.add_argument("--server", required=True, help="Solved server address, host:port")
    ap.add_argument("--timeout", type=float, default=None, help="Seconds to wait on each exchange")
    ap.add_argument("--strict-port", action="store_true", help="Reject ports that are not plain digits")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log protocol traffic")

    sub = ap.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Print whether a field is solved")
    get.add_argument("file", type=int)
    get.add_argument("field", type=int)

    set_ = sub.add_parser("set", help="Mark a field solved")
    set_.add_argument("file", type=int)
    set_.add_argument("field", type=int)

    getall = sub.add_parser("getall", help="List unsolved fields in a range")
    getall.add_argument("file", type=int)
    getall.add_argument("first", type=int)
    getall.add_argument("last", type=int)
    getall.add_argument("--max", type=int, default=0, dest="max_fields",
                        help="Return at most this many fields (0 = all)")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="[%(name)s] %(levelname)s %(message)s")

    try:
        with SolvedClient(args.server, timeout=args.timeout, strict_port=args.strict_port) as client:
            if args.command == "get":
                print("solved" if client.get(args.file, args.field) else "unsolved")
            elif args.command == "set":
                client.set(args.file, args.field)
                print("ok")
            else:
                fields = client.getall(args.file, args.first, args.last, args.max_fields)
                print(" ".join(str(f) for f in fields))
    except SolvedClientError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0
