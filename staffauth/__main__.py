"""
Run the API server. PORT selects the listening port (default 8000):

  PORT=9000 python -m staffauth
"""

import logging

import uvicorn

from staffauth.core.config import get_settings
from staffauth.main import app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    logger.info("Starting staffauth on port %s (env=%s)", settings.PORT, settings.APP_ENV)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
