"""
Coffee API - Startup Orchestrator & Entrypoint
===============================================

What:  The one-shot boot sequence and the process entrypoint.
How:   A linear sequence with no retries:

    ┌───────────────┐   ┌─────────────┐   ┌──────────────┐   ┌─────────────┐   ┌─────────────┐
    │ 1. Resolve    │──▶│ 2. Build    │──▶│ 3. Authenti- │──▶│ 4. Sync     │──▶│ 5. Bind     │
    │    config     │   │    DB + app │   │    cate      │   │    schema   │   │    listener │
    └───────────────┘   └─────────────┘   └──────────────┘   └─────────────┘   └─────────────┘
          │                                     │                   │
          └──────── fatal → exit 1 ─────────────┴───────────────────┘

    1. DB host/user/password come from the parameter store (fetched
       concurrently, each falling back to its local default); DB name/port
       and the listener port come from Settings.
    2. Database engine and FastAPI app are built from the ServiceConfig.
    3. SELECT 1 against the live database.
    4. CREATE TABLE for any missing table.
    5. uvicorn serves the app until the process is stopped.

Terminal states: serving, or terminated with exit code 1.
"""

import asyncio
import logging
import sys
from typing import Callable, Optional, Tuple

import uvicorn
from fastapi import FastAPI

from coffee_api.config import ServiceConfig, Settings
from coffee_api.database import Database
from coffee_api.exceptions import StartupError
from coffee_api.main import create_app, setup_logging
from coffee_api.services.parameter_store import ParameterResolver

logger = logging.getLogger(__name__)

EXIT_STARTUP_FAILURE = 1


async def resolve_service_config(
    settings: Settings,
    resolver: Optional[ParameterResolver] = None,
) -> ServiceConfig:
    """
    Step 1: build the ServiceConfig.

    Individual parameter failures fall back to the configured defaults.
    Anything else raised while resolving is a total failure and becomes a
    StartupError.
    """
    if not settings.use_parameter_store:
        logger.info("Parameter store disabled; using local database defaults")
        return ServiceConfig.from_settings(
            settings,
            db_host=settings.db_host_default,
            db_user=settings.db_user_default,
            db_password=settings.db_password_default,
        )

    resolver = resolver or ParameterResolver(region_name=settings.aws_region)
    try:
        db_host, db_user, db_password = await asyncio.gather(
            resolver.resolve_or_default(
                settings.db_host_parameter, settings.db_host_default, decrypt=True
            ),
            resolver.resolve_or_default(
                settings.db_user_parameter, settings.db_user_default, decrypt=True
            ),
            resolver.resolve_or_default(
                settings.db_password_parameter, settings.db_password_default, decrypt=True
            ),
        )
    except Exception as e:
        raise StartupError(
            stage="resolve_parameters",
            message=f"Error resolving parameters: {e}",
            context={"error_type": type(e).__name__},
        ) from e

    return ServiceConfig.from_settings(
        settings, db_host=db_host, db_user=db_user, db_password=db_password
    )


async def prepare_database(database: Database) -> None:
    """Steps 3 and 4: authenticate, then create missing tables."""
    try:
        await database.authenticate()
    except Exception as e:
        raise StartupError(
            stage="authenticate",
            message=f"Unable to connect to the database: {e}",
            context={"url": database.display_url, "error_type": type(e).__name__},
        ) from e
    logger.info("Connection has been established successfully.")

    try:
        await database.sync_schema()
    except Exception as e:
        raise StartupError(
            stage="sync_schema",
            message=f"Unable to synchronize models: {e}",
            context={"url": database.display_url, "error_type": type(e).__name__},
        ) from e
    logger.info("Models synchronized.")


async def bootstrap(
    settings: Settings,
    resolver: Optional[ParameterResolver] = None,
    database_factory: Callable[[ServiceConfig], Database] = Database.from_config,
) -> Tuple[FastAPI, ServiceConfig]:
    """
    Steps 1-4. Returns an app that is safe to serve.

    Raises:
        StartupError: any fatal step failed; the database engine (if one was
                      built) has been disposed.
    """
    config = await resolve_service_config(settings, resolver)

    database = database_factory(config)
    app = create_app(config, database)
    logger.info("Database target: %s", database.display_url)

    try:
        await prepare_database(database)
    except StartupError:
        await database.dispose()
        raise

    return app, config


async def serve(settings: Settings) -> int:
    """
    Run the full boot sequence and serve until stopped.

    Returns:
        Process exit code: 0 after a normal shutdown, 1 on startup failure
        (including a listener that could not bind).
    """
    try:
        app, config = await bootstrap(settings)
    except StartupError as e:
        logger.error("%s (stage=%s)", e.message, e.stage)
        return EXIT_STARTUP_FAILURE

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.bind_host,
            port=config.port,
            log_config=None,
            log_level=config.log_level.lower(),
        )
    )
    logger.info("Server listening on port %d", config.port)
    await server.serve()
    if not server.started:
        logger.error("HTTP listener failed to start on %s:%d", config.bind_host, config.port)
        return EXIT_STARTUP_FAILURE
    return 0


def main() -> None:
    """Process entrypoint (`coffee-api` / `python -m coffee_api`)."""
    settings = Settings()
    setup_logging(settings.log_level)
    sys.exit(asyncio.run(serve(settings)))


if __name__ == "__main__":
    main()
