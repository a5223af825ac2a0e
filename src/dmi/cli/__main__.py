"""
Command-line entry point for DMI.

Usage:
    python -m dmi.cli <command> [options]

Available commands:
    write-modes  - List write modes, or resolve one by name
    render       - Render a statement to SQL text for an engine

Examples:
    python -m dmi.cli write-modes
    python -m dmi.cli write-modes --name updateinsert
    python -m dmi.cli render delete --table users --where id=5 --where active=1
    python -m dmi.cli render select --table users --field id --field name --top 10 --engine SQLServer
"""

import argparse
import sys
from typing import Any, List, Optional

from dmi.exceptions import DMIError
from dmi.infrastructure.sql.operations import (
    DeleteStatement,
    InsertStatement,
    SelectStatement,
    Statement,
    UpdateStatement,
)
from dmi.io.writer.write_mode import WriteModeType


def _parse_value(text: str) -> Any:
    """Interpret a --value argument: NULL, integer, float, otherwise a string."""
    if text.upper() == "NULL":
        return None
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    return text


def _write_modes(args: argparse.Namespace) -> int:
    if args.name is None:
        for mode in WriteModeType:
            print(f"{mode.code:>3}  {mode.display_name}")
        return 0

    mode = WriteModeType.value_of_ignore_case(args.name)
    if mode is None:
        print(f"Unknown write mode: {args.name}", file=sys.stderr)
        return 1
    print(f"{mode.code:>3}  {mode.display_name}")
    return 0


def _build_statement(args: argparse.Namespace) -> Statement:
    engine = args.engine
    if args.verb == "select":
        statement: Statement = SelectStatement(engine)
        statement.select_distinct(args.distinct)
        statement.set_top(args.top)
        for clause in args.order_by:
            statement.add_order_by(clause)
    elif args.verb == "delete":
        statement = DeleteStatement(engine, strict=True if args.strict else None)
    elif args.verb == "insert":
        statement = InsertStatement(engine)
    else:
        statement = UpdateStatement(engine, try_build_where=args.build_where)

    for table in args.table:
        statement.add_table(table)
    for field in args.field:
        statement.add_field(field)
    for value in args.value:
        statement.add_value(_parse_value(value))
    statement.add_where_clauses(args.where)
    return statement


def _render(args: argparse.Namespace) -> int:
    try:
        statement = _build_statement(args)
        text = statement.to_statement_text()
    except (DMIError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = argparse.ArgumentParser(
        prog="dmi.cli",
        description="DMI CLI - statement rendering and write-mode lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    modes_parser = subparsers.add_parser(
        "write-modes",
        help="List write modes or resolve one by name",
    )
    modes_parser.add_argument("--name", help="Write mode name, case ignored")

    render_parser = subparsers.add_parser(
        "render",
        help="Render a statement to SQL text",
    )
    render_parser.add_argument("verb", choices=["select", "delete", "insert", "update"])
    render_parser.add_argument("--table", action="append", default=[], help="Table (repeatable)")
    render_parser.add_argument("--field", action="append", default=[], help="Field (repeatable)")
    render_parser.add_argument("--value", action="append", default=[], help="Value (repeatable)")
    render_parser.add_argument("--where", action="append", default=[], help="Where clause (repeatable)")
    render_parser.add_argument("--order-by", action="append", default=[], help="ORDER BY clause")
    render_parser.add_argument("--top", type=int, default=0, help="Row limit for select")
    render_parser.add_argument("--distinct", action="store_true", help="SELECT DISTINCT")
    render_parser.add_argument(
        "--build-where",
        action="store_true",
        help="Build an update's where clause from its fields and values",
    )
    render_parser.add_argument(
        "--engine",
        default=None,
        help="Database engine (defaults to DMI_DATABASE_ENGINE)",
    )
    render_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject a delete without a table",
    )

    args = parser.parse_args(argv)

    if args.command == "write-modes":
        return _write_modes(args)
    elif args.command == "render":
        return _render(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
