"""
ASGI entrypoint: expose `app` pour les process managers (ex: uvicorn/gunicorn workers).
Toute la configuration est centralisée dans boutique.app_setup.factory.
"""

from boutique.app import app

__all__ = ["app"]
