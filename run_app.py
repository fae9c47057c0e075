#!/usr/bin/env python3
"""
Earnings API Runner
===================

Run the Earnings API and its one-off maintenance tasks.

Usage:
    python run_app.py                          # Development server with auto-reload
    python run_app.py --mode prod              # Production mode
    python run_app.py --port 5001              # Custom port
    python run_app.py --host 127.0.0.1         # Custom host
    python run_app.py --init-db                # Create tables and exit
    python run_app.py --hash-password secret   # Print an ADMIN_PASSWORD_HASH value
"""

import argparse
import asyncio
import logging
import sys

logger = logging.getLogger("run_app")

def hash_admin_password(password: str) -> str:
    """bcrypt hash suitable for ADMIN_PASSWORD_HASH"""
    from earnings_api.core.security import SecurityUtils
    return SecurityUtils.hash_password(password)

async def create_tables():
    from earnings_api.core.database import init_db, close_db
    try:
        await init_db()
    finally:
        await close_db()

def run_server(host: str, port: int, reload: bool, workers: int):
    import uvicorn
    from earnings_api.core.config import settings

    logger.info(f"Starting {settings.APP_NAME} on {host}:{port} (reload={reload})")
    uvicorn.run(
        "earnings_api.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=None if reload else workers,
        log_level=settings.LOG_LEVEL.lower()
    )

def build_parser() -> argparse.ArgumentParser:
    from earnings_api.core.config import settings

    parser = argparse.ArgumentParser(
        description="Earnings API Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_app.py                        # Development server
  python run_app.py --mode prod --port 80  # Production server
  python run_app.py --init-db              # Create tables
        """
    )

    parser.add_argument(
        "--mode",
        choices=["dev", "prod"],
        default="dev",
        help="Server mode (default: dev)"
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind to (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind to (default: {settings.PORT})"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.WORKERS,
        help="Worker processes in prod mode"
    )
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload"
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the earnings tables and exit"
    )
    parser.add_argument(
        "--hash-password",
        metavar="PASSWORD",
        help="Print a bcrypt hash for ADMIN_PASSWORD_HASH and exit"
    )
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.hash_password:
        print(hash_admin_password(args.hash_password))
        return 0

    from earnings_api.core.logging import setup_logging
    setup_logging()

    if args.init_db:
        asyncio.run(create_tables())
        logger.info("Tables created")
        return 0

    reload = not args.no_reload and args.mode != "prod"
    run_server(args.host, args.port, reload, args.workers)
    return 0

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
