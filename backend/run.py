#!/usr/bin/env python3
"""
kubepilot backend server.
"""

import uvicorn
from dotenv import load_dotenv

# .env before settings are read
load_dotenv()

from kubepilot.config import get_settings
from kubepilot.core.logging import setup_logging

# our logging config, not uvicorn's default log_config
setup_logging()


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "kubepilot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_debug,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
