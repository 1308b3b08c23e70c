#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: requests are asyncio tasks on one event loop (FastAPI + uvicorn).
The repository is the only shared state: the in-memory backend guards it with
a reader/writer lock, PostgreSQL with constraints and transactions.

Usage:
    url-shortener [-a host:port] [-b base_url] [-f file_path] [-d dsn]

Environment variables (override flags):
    SERVER_ADDRESS - host:port to bind
    BASE_URL - Base URL for short links, same host:port as SERVER_ADDRESS
    FILE_STORAGE_PATH - JSON snapshot file for the in-memory repository
    DATABASE_DSN - PostgreSQL DSN; selects the SQL repository
    REDIS_URL - Redis connection URL for the redirect cache (optional)
    LOG_LEVEL, LOG_FORMAT, LOG_FILE - Logging
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from url_shortener.config import Config, load_config
from url_shortener.lib.common.logging_config import setup_logging
from url_shortener.lib.database.cache import RedisCache
from url_shortener.lib.database.factory import create_repository
from url_shortener.lib.exceptions import ShortenerError
from url_shortener.lib.service import URLShortenerService
from url_shortener.lib.shortcode import ShortCodeGenerator
from url_shortener.web_app import create_app


async def build_service(config: Config, logger) -> URLShortenerService:
    """Create repository, cache and service from configuration."""
    repository = await create_repository(
        database_dsn=config.database_dsn,
        file_storage_path=config.file_storage_path,
        timeout_seconds=config.db_timeout_seconds,
        pool_max_size=config.db_pool_max_size,
        logger=logger,
    )

    cache = None
    if config.redis_url:
        logger.info("Connecting to Redis for redirect cache")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    return URLShortenerService(
        repository=repository,
        base_url=config.base_url,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        cache=cache,
        logger=logger,
        max_attempts=config.max_collision_retries,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service on startup and close it on shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")
    service = await build_service(config, logger)
    app.state.service = service
    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down URL shortener service...")
        await service.close()
        logger.info("Service stopped")


def main(argv=None):
    """Main entry point."""
    try:
        config = load_config(sys.argv[1:] if argv is None else argv)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        log_format=config.log_format,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.summary()}")

    # Service is created in lifespan
    app = create_app(service=None, config=config, logger=logger)
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except (ShortenerError, OSError) as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
