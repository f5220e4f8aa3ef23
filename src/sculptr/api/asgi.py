"""ASGI entrypoint for the sculptr API."""

from sculptr.api.app import create_app
from sculptr.containers import build_container

app = create_app(build_container())
