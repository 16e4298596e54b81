"""Local server entrypoint used by the desktop shell."""

import uvicorn

from voice_journal.api.app import create_app
from voice_journal.config import Settings
from voice_journal.containers import build_container


def main() -> None:
    """Run the API on the configured host and port."""
    settings = Settings()
    app = create_app(build_container(settings))
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
