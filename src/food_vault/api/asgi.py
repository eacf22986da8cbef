"""ASGI entrypoint for the food vault API."""

from food_vault.api.app import create_app
from food_vault.containers import build_container

app = create_app(build_container())
