#!/usr/bin/env python3
"""
Entry point for the University Expenses report.

Usage:
    python run.py serve [--port PORT] [--host HOST]
    python run.py export [--month YYYY-MM] [--format xlsx|csv] [--output PATH]
    python run.py init-db
"""

import argparse
import logging
import sys

import uvicorn

from core.database import DatabaseConnection, DatabaseConnectionError
from data.schema_db import create_schema
from features.export_reports import ReportBuilder, load_export_config

logger = logging.getLogger("expenses_report")


def export_to_file(args) -> int:
    try:
        config = load_export_config(args.config)
        with DatabaseConnection(config_path=args.config) as db:
            builder = ReportBuilder(db.connection, month_filter=args.month, config=config)
            content = builder.to_csv() if args.format == "csv" else builder.to_bytes()
    except (DatabaseConnectionError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1

    output = args.output or (config.csv_filename if args.format == "csv" else config.filename)
    with open(output, "wb") as f:
        f.write(content)
    logger.info("Report written to %s (%d bytes)", output, len(content))
    return 0


def init_db(args) -> int:
    try:
        with DatabaseConnection(config_path=args.config) as db:
            create_schema(db.connection)
    except (DatabaseConnectionError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1
    return 0


def serve(args) -> int:
    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        log_level="info"
    )
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="University Expenses report")
    parser.add_argument("--config", default=None, help="Path to config.ini (default: $EXPENSES_CONFIG or config/config.ini)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the download API")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to run on")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.set_defaults(func=serve)

    export_parser = subparsers.add_parser("export", help="Write the report to a file")
    export_parser.add_argument("--month", default=None, help="Only include YYYY-MM")
    export_parser.add_argument("--format", choices=["xlsx", "csv"], default="xlsx")
    export_parser.add_argument("--output", default=None, help="Output path (default: configured filename)")
    export_parser.set_defaults(func=export_to_file)

    init_parser = subparsers.add_parser("init-db", help="Create the expenses and income tables")
    init_parser.set_defaults(func=init_db)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
