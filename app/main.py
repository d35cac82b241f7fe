"""
Application entrypoint.

Builds the FastAPI ``app`` from environment configuration; uvicorn
serves ``app.main:app``.
"""

from app.api.main import create_app

app = create_app()
