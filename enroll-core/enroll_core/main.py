"""ASGI entry point: ``uvicorn enroll_core.main:app``."""

from enroll_core.app import create_app

app = create_app()
