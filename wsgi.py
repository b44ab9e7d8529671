"""
WSGI entry point for deployment (Gunicorn).
Exposes the Flask server behind the Dash app.
"""
from bukukas.app import server  # noqa: F401
