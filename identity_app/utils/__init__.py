# identity_app/utils/__init__.py
"""
Application utilities
"""
