"""ASGI entrypoint for the photo party API."""

from photo_party.api.app import create_app
from photo_party.containers import build_container

app = create_app(build_container())
