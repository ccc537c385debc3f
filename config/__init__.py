# config/__init__.py
"""
Application configuration package
"""

from .base import Config, DevelopmentConfig, ProductionConfig, TestingConfig, get_config_class

__all__ = [
    "Config",
    "DevelopmentConfig",
    "TestingConfig",
    "ProductionConfig",
    "get_config_class",
]
