# payportal/__init__.py
"""PayPortal credential security service - Core Package"""
__version__ = "1.0.0"

from payportal.app import create_app  # noqa: E402

__all__ = ['create_app', '__version__']
