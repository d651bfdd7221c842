"""Application entrypoint."""

from __future__ import annotations

import uvicorn

from usersearch.config import get_settings
from usersearch.logging import configure_logging, logger
from usersearch.server.app import create_app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)

    logger.info(
        "server_starting",
        environment=settings.environment,
        host=settings.server.host,
        port=settings.server.port,
        dataset=str(settings.server.dataset_path),
    )
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)


if __name__ == "__main__":
    main()
