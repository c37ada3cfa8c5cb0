"""Run the API with uvicorn: ``python -m finsync.presentation.api``."""

import uvicorn

from finsync_config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "finsync.presentation.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )


if __name__ == "__main__":
    main()
