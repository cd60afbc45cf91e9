# api/main.py
import logging

import uvicorn

from account_service.app import create_app
from account_service.config import Settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = Settings.from_env()
app = create_app(settings)


if __name__ == "__main__":
    logger.info(
        "Server running in %s mode on port %s", settings.environment, settings.port
    )
    uvicorn.run("api.main:app", host="0.0.0.0", port=settings.port)
