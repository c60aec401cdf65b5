from __future__ import annotations

import logging

from aiohttp import web
from dotenv import load_dotenv

from automation.logging_context import configure_logging

from .config import load_config
from .server import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()
    config = load_config()
    configure_logging(config.log_level)

    app = create_app(config)
    logger.info(
        "Webhook server listening on %s:%s (payload shape: %s)",
        config.host,
        config.port,
        config.payload_shape,
    )
    logger.info("POST booking requests to /webhook/booking with JSON body")
    web.run_app(app, host=config.host, port=config.port, print=None)


if __name__ == "__main__":
    main()
