"""
Notes API package.

Exposes the application factory so the service can be built with
``create_app()`` or served with ``uvicorn --factory notes_api:create_app``.
"""

from .main import create_app  # noqa: F401
