# payportal/controllers/__init__.py
"""Controllers exposing the credential lifecycle and payments over JSON"""
from .auth_controller import auth_bp
from .payment_controller import payments_bp

__all__ = ['auth_bp', 'payments_bp']
