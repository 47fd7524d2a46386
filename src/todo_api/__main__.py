"""
Process entrypoint: python -m todo_api (or the `todo-api` console script).

Opens the storage engine and ensures the schema before binding, so a database
that cannot be opened terminates the process with a non-zero status.
"""
from __future__ import annotations

import logging
import sys

import uvicorn

from .errors import StorageError
from .logging_config import configure_logging
from .main import create_app
from .repositories import open_repository
from .settings import get_settings

logger = logging.getLogger("todo_api")


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        repository = open_repository(settings)
    except StorageError as e:
        logger.critical("cannot open %s storage: %s", settings.persistence_backend, e)
        sys.exit(1)

    app = create_app(repository)
    logger.info("Listening on %s:%d...", settings.host, settings.port)
    # Resolved root level, so uvicorn always receives a name it knows
    level_name = logging.getLevelName(logging.getLogger().level).lower()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=level_name)


if __name__ == "__main__":
    main()
