import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from adapters import AdapterError, DatabaseSettings, open_handle, registered_drivers


def _parse_params(pairs: List[str]) -> Optional[Dict[str, Any]]:
    if not pairs:
        return None
    params: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Parameter must be name=value, got: {pair!r}")
        name, value = pair.split("=", 1)
        params[name.strip().lstrip("@")] = value
    return params


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="dbhandle", description="Run SQL against a scheme://rest connection string.")
    parser.add_argument("--url", default=None, help="Connection string. Defaults to DATABASE_URL / DB_* from the environment.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every statement at DEBUG level.")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("rows", "Print every result row."),
        ("row", "Print the first result row."),
        ("count", "Print the number of rows the query returns."),
        ("exec", "Run a statement and print the affected row count."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("sql", help="SQL text; @name placeholders are bound from -p.")
        cmd.add_argument("-p", "--param", action="append", default=[], metavar="NAME=VALUE", help="Named parameter value.")

    sub.add_parser("drivers", help="List registered connection-string schemes.")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    if args.command == "drivers":
        _emit(registered_drivers())
        return 0

    url = args.url or DatabaseSettings.from_env().connection_string()
    params = _parse_params(args.param)
    bound = (params,) if params is not None else ()

    with open_handle(url) as handle:
        if args.command == "rows":
            _emit(handle.query_rows(args.sql, *bound))
        elif args.command == "row":
            _emit(handle.query_row(args.sql, *bound))
        elif args.command == "count":
            _emit({"count": handle.count(args.sql, *bound)})
        elif args.command == "exec":
            result = handle.execute(args.sql, *bound)
            _emit({"rowcount": result.rowcount, "lastrowid": result.lastrowid})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except (AdapterError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
