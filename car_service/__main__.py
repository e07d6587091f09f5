"""Process entry point: validate configuration, then serve with uvicorn.

Exits with status 1 when required environment variables are missing or invalid.
"""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from car_service.config import get_settings
from car_service.infrastructure.observability import setup_logging
from car_service.main import create_app

logger = logging.getLogger("car_service")


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.critical(
            "Invalid configuration, exiting",
            extra={"errors": e.errors(include_url=False)},
        )
        sys.exit(1)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
