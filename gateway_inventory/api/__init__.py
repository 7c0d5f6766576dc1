"""
Gateway Inventory Web API.

    from gateway_inventory.api import create_app
    app = create_app()
"""

from .main import create_app, get_app

__all__ = ["create_app", "get_app"]
