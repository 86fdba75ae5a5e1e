"""Command line entrypoint that serves the API with uvicorn."""

import uvicorn

from photo_party.app_logging import configure_logging
from photo_party.config import Settings


def main() -> None:
    """Run the ASGI app on the configured host and port."""
    configure_logging()
    settings = Settings()
    uvicorn.run("photo_party.api.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
