"""ASGI entrypoint for the voice journal API."""

from voice_journal.api.app import create_app
from voice_journal.containers import build_container

app = create_app(build_container())
