"""ASGI entrypoint for the fridge tracker API."""

from fridge_tracker.api.app import create_app
from fridge_tracker.containers import build_container

app = create_app(build_container())
