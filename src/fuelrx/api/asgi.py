"""ASGI entrypoint for the FuelRx nutrition API."""

from fuelrx.api.app import create_app
from fuelrx.containers import build_container

app = create_app(build_container())
