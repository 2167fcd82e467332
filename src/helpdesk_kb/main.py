"""Entrypoint: run the Helpdesk KB server."""

import uvicorn

from helpdesk_kb.api.app import create_app
from helpdesk_kb.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
