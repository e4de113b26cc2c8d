#!/usr/bin/env python3
"""
Main entry point for the goto redirection service.

The store lives in this single process: lookups and registrations run in
Starlette's threadpool against one Store guarded by a reader/writer lock.
Run exactly one process per persistence log.

Usage:
    python app.py

Environment variables:
    DB_PATH - Persistence log path (in-memory only if unset)
    PERSIST_UPDATES - Append overwrites to the log too (default true)
    FSYNC - fsync the log after every append (default false)
    HOST - Host to bind to
    PORT - Port to listen on
    MAX_PAYLOAD_BYTES - Maximum target URL body size
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from goto_links.hasher import Hasher
from goto_links.store import Store
from goto_links.common.logging_config import setup_logging
from web_app import create_app


def build_store(config, logger) -> Store:
    """Create the store described by the configuration."""
    hasher = Hasher(length=config.id_length)

    if not config.db_path:
        logger.info("No DB_PATH configured - mappings are kept in memory only")
        return Store(hasher=hasher, persist_updates=config.persist_updates, logger=logger)

    store = Store.from_path(
        config.db_path,
        hasher=hasher,
        persist_updates=config.persist_updates,
        fsync=config.fsync,
        logger=logger,
    )
    logger.info(f"Store ready with {len(store)} mappings (persistent={store.persistent})")
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting goto service...")
    app.state.store = build_store(config, logger)
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down goto service...")
    app.state.store.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("goto redirection service")
    logger.info(f"Configuration: {config.model_dump()}")

    app = create_app(store=None, config=config)
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
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
