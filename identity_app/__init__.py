# identity_app/__init__.py
"""
Contact identity reconciliation application package
"""
