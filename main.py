"""CycleScope Domain API entrypoint."""

from __future__ import annotations

import uvicorn

from cyclescope.api import create_api_app
from cyclescope.core.config import settings
from cyclescope.core.logging import setup_logging


setup_logging()

app = create_api_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,
    )
