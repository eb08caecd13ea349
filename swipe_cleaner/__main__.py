"""Run the triage server: python -m swipe_cleaner"""

import logging

import uvicorn
from .config import settings

logger = logging.getLogger("swipe_cleaner")


def main():
    logger.info(f"Triaging {settings.library_dir}, trash at {settings.resolved_trash_dir}")
    uvicorn.run(
        "swipe_cleaner.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
