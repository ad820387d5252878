"""Entry point for the records API (``uvicorn records_api.app_factory:app``)."""
from records_api.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
