"""Start the statebot HTTP server.

    python -m statebot
"""

import uvicorn

from statebot.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "statebot.api.app:app",
        host=settings.api.host,
        port=settings.listen_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
