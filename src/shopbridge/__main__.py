import argparse
import logging
import sys
from typing import List, Optional

from shopbridge.app import configure_logging, create_app
from shopbridge.core.config import Config
from shopbridge.db import create_db_engine, create_schema

logger = logging.getLogger(__name__)


def _serve(config: Config, args: argparse.Namespace) -> None:
    app = create_app(config)
    app.run(
        host=args.host or config.app.host,
        port=args.port or config.app.port,
        debug=config.app.debug,
    )


def _mcp(config: Config, args: argparse.Namespace) -> None:
    from shopbridge.mcp_server import main as mcp_main

    if args.port:
        config.app.mcp_port = args.port
    if args.host:
        config.app.mcp_host = args.host
    mcp_main(config)


def _init_db(config: Config, args: argparse.Namespace) -> None:
    configure_logging(config.app.log_level)
    engine = create_db_engine(config.database)
    create_schema(engine)
    logger.info("Schema created")

    if args.seed:
        from shopbridge.seed import seed

        print("Seeding database...")
        added = seed(engine)
        print(f"\nSeed completed: {added} product(s) added.")
    engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shopbridge",
        description="Cart, catalog and Chatwoot backend with REST and MCP surfaces",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the REST API (Flask)")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(handler=_serve)

    mcp = sub.add_parser("mcp", help="Run the MCP tool server (streamable HTTP)")
    mcp.add_argument("--host", default=None)
    mcp.add_argument("--port", type=int, default=None)
    mcp.set_defaults(handler=_mcp)

    init_db = sub.add_parser("init-db", help="Create tables in DATABASE_URL")
    init_db.add_argument("--seed", action="store_true", help="Also insert the sample catalog")
    init_db.set_defaults(handler=_init_db)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    try:
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    args.handler(config, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
