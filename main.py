from __future__ import annotations

import uvicorn

from stockpick.api import create_api_app
from stockpick.core.config import settings
from stockpick.core.logging import setup_logging


setup_logging()
app = create_api_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
