#!/usr/bin/env python3
"""
Command-line interface for URL shortener service.

Talks to the configured repository directly, without the HTTP server.

Usage:
    python url_shortener_cli.py shorten <url>
    python url_shortener_cli.py batch <url> [<url> ...]
    python url_shortener_cli.py resolve <short_code>
    python url_shortener_cli.py export <path>
    python url_shortener_cli.py ping
"""

import argparse
import asyncio
import json
import sys
import os
from typing import List, Optional

# Add repository root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from url_shortener.lib.common.logging_config import setup_logging
from url_shortener.lib.database import JSONFileStore, RedisCache, Snapshotter, create_repository
from url_shortener.lib.exceptions import ShortenerError
from url_shortener.lib.service import BatchItem, URLShortenerService


def print_success(payload: dict) -> int:
    print(json.dumps({"success": True, **payload}, indent=2))
    return 0


def print_failure(error: ShortenerError) -> int:
    print(json.dumps({
        "success": False,
        "error": str(error),
        "error_code": error.error_code,
    }, indent=2), file=sys.stderr)
    return 1


class URLShortenerCLI:
    """Command-line interface for URL shortener."""

    def __init__(
        self,
        base_url: str,
        database_dsn: Optional[str] = None,
        file_storage_path: Optional[str] = None,
        redis_url: Optional[str] = None,
        verbose: bool = False,
    ):
        """Initialize CLI."""
        self.base_url = base_url
        self.database_dsn = database_dsn
        self.file_storage_path = file_storage_path
        self.redis_url = redis_url
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.repository = None
        self.service = None

    async def initialize(self):
        """Initialize repository and service."""
        self.repository = await create_repository(
            database_dsn=self.database_dsn,
            file_storage_path=self.file_storage_path,
            logger=self.logger,
        )

        cache = None
        if self.redis_url:
            cache = RedisCache(redis_url=self.redis_url, logger=self.logger)
            await cache.connect()

        self.service = URLShortenerService(
            repository=self.repository,
            base_url=self.base_url,
            cache=cache,
            logger=self.logger,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def shorten(self, url: str) -> int:
        """Shorten a URL."""
        try:
            result = await self.service.shorten(url)
        except ShortenerError as e:
            return print_failure(e)

        return print_success({
            "short_code": result.short_code,
            "short_url": result.link,
            "original_url": url,
            "existed": result.existed,
        })

    async def batch(self, urls: List[str]) -> int:
        """Shorten several URLs in one batch."""
        items = [BatchItem(correlation_id=str(i), original_url=u) for i, u in enumerate(urls)]
        try:
            result = await self.service.batch(items)
        except ShortenerError as e:
            return print_failure(e)

        return print_success({
            "had_existing": result.had_existing,
            "items": [
                {"correlation_id": i.correlation_id, "short_url": i.short_url}
                for i in result.items
            ],
        })

    async def resolve(self, short_code: str) -> int:
        """Get original URL for a short code."""
        try:
            original_url = await self.service.resolve(short_code)
        except ShortenerError as e:
            return print_failure(e)

        return print_success({"short_code": short_code, "original_url": original_url})

    async def export(self, path: str) -> int:
        """Write every record to a JSON snapshot file."""
        if not isinstance(self.repository, Snapshotter):
            print(json.dumps({
                "success": False,
                "error": f"{type(self.repository).__name__} cannot export records",
            }, indent=2), file=sys.stderr)
            return 1

        try:
            records = await self.repository.snapshot()
            await asyncio.to_thread(JSONFileStore(path, logger=self.logger).save, records)
        except ShortenerError as e:
            return print_failure(e)

        return print_success({"path": path, "count": len(records)})

    async def ping(self) -> int:
        """Check that the durability backend is reachable."""
        healthy = await self.service.health_check()
        print(json.dumps({"success": healthy, "healthy": healthy}, indent=2))
        return 0 if healthy else 1


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Shorten several URLs at once
  %(prog)s batch https://example.com/a https://example.com/b

  # Get original URL
  %(prog)s resolve aB3xQ9

  # Export all records
  %(prog)s export backup.json

  # Check storage health
  %(prog)s ping
        """
    )

    parser.add_argument(
        "--dsn",
        default=os.getenv("DATABASE_DSN"),
        help="PostgreSQL DSN (default: from DATABASE_DSN env)"
    )
    parser.add_argument(
        "--file",
        default=os.getenv("FILE_STORAGE_PATH", "data.json"),
        help="Snapshot file used when no DSN is set (default: from FILE_STORAGE_PATH env or data.json)"
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("BASE_URL", "http://localhost:8080/"),
        help="Base URL for printed short links"
    )
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")

    batch_parser = subparsers.add_parser("batch", help="Shorten several URLs in one batch")
    batch_parser.add_argument("urls", nargs="+", help="URLs to shorten")

    resolve_parser = subparsers.add_parser("resolve", help="Get original URL")
    resolve_parser.add_argument("short_code", help="Short code to lookup")

    export_parser = subparsers.add_parser("export", help="Export all records as JSON")
    export_parser.add_argument("path", help="Output file")

    subparsers.add_parser("ping", help="Check storage health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = URLShortenerCLI(
        base_url=args.base_url,
        database_dsn=args.dsn,
        file_storage_path=args.file,
        redis_url=args.redis_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "batch":
            return await cli.batch(args.urls)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code)
        elif args.command == "export":
            return await cli.export(args.path)
        elif args.command == "ping":
            return await cli.ping()
        else:
            parser.print_help()
            return 1

    except ShortenerError as e:
        return print_failure(e)
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
