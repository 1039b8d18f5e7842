"""
API module - routes and schemas.
Routes are split by domain: hierarchy, hierarchies, settings, db.
"""

from .routes import register_routes

__all__ = ["register_routes"]
