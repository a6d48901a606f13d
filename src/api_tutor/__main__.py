"""Run the api-tutor HTTP service: ``python -m api_tutor``."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from api_tutor.config import Settings
from api_tutor.logging_config import setup_logging
from api_tutor.server import create_app

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(prog="api_tutor", description=__doc__)
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    logger.info("Serving on http://%s:%s (default model %s)", args.host, args.port, settings.default_model)
    uvicorn.run(
        create_app(settings),
        host=args.host,
        port=args.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
