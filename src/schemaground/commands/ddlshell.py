"""Command line interface for managing databases and executing DDL.

This module provides a command line interface on top of
:class:`schemaground.engine.DatabaseEngine`, it can create and drop databases,
execute ``CREATE TABLE``, ``ALTER TABLE`` and ``DROP TABLE`` statements
and display the schema and the rows of the stored tables.

The rows of a table are printed to the console in a tabular format
using the :mod:`schemaground.utils.tabulate` module.
"""

import argparse

import pydantic

from schemaground.catalog import StructuralError
from schemaground.config import load_settings
from schemaground.engine import DatabaseEngine, EngineError
from schemaground.sql import SQLParseError, SQLTokenizeException
from schemaground.storage import StorageError
from schemaground.utils import tabulate
from schemaground.utils.logging import configure_logging

ERRORS = (
    SQLTokenizeException,
    SQLParseError,
    StructuralError,
    StorageError,
    EngineError,
    pydantic.ValidationError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage databases and execute DDL statements.")
    parser.add_argument("--data-dir", help="Directory where databases are stored.")
    parser.add_argument("--log-level", help="Minimum level of the logged events.")
    commands = parser.add_subparsers(dest="command", required=True)

    create_db = commands.add_parser("create-db", help="Create a new database.")
    create_db.add_argument("database")

    drop_db = commands.add_parser("drop-db", help="Delete a database with all its tables.")
    drop_db.add_argument("database")

    commands.add_parser("list", help="List the existing databases.")

    schema = commands.add_parser("schema", help="Print the tables of a database.")
    schema.add_argument("database")

    execute = commands.add_parser("exec", help="Execute a DDL statement on a database.")
    execute.add_argument("database")
    execute.add_argument("sql", help="The statement to execute.")

    show = commands.add_parser("show", help="Print the rows of a table.")
    show.add_argument("database")
    show.add_argument("table")
    show.add_argument("--max-rows", type=int, default=20)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse the command line arguments and run the requested command."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        settings = load_settings(**overrides)
        configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
        run(DatabaseEngine(settings), args)
    except ERRORS as e:
        print(f"Error: {e}")
        return 1
    return 0


def run(engine: DatabaseEngine, args: argparse.Namespace) -> None:
    if args.command == "create-db":
        engine.create_database(args.database)
        print(f"Database created: {args.database}")
    elif args.command == "drop-db":
        engine.drop_database(args.database)
        print(f"Database dropped: {args.database}")
    elif args.command == "list":
        for name in engine.list_databases():
            print(name)
    elif args.command == "schema":
        print(engine.show_database_schema(args.database))
    elif args.command == "exec":
        statement = engine.execute_ddl(args.database, args.sql)
        print(f"OK: {statement!r}")
    elif args.command == "show":
        engine.get_database(args.database).require_table(args.table)
        rows = engine.storage(args.database).scan(args.table)
        print(tabulate.tabulate(rows, max_rows=args.max_rows))


if __name__ == "__main__":
    raise SystemExit(main())
