# identity_app/routes/__init__.py
"""
Application routes package
"""

from .identify import register_identify_routes


def init_routes(app):
    """Initialize all application routes"""
    register_identify_routes(app)
