"""Serve the sync API: python -m ledgersync"""

import uvicorn

from ledgersync.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "ledgersync.main:app",
        host=settings.SYNC_HOST,
        port=settings.SYNC_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
