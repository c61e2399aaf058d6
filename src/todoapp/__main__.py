"""todoapp entrypoint.

Run with:
  python -m todoapp
"""

import uvicorn

from todoapp.config import Settings
from todoapp.logging_setup import setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        "todoapp.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,
    )

if __name__ == "__main__":
    main()
