# payportal/models/__init__.py
"""Database models for the PayPortal credential security service"""
from .user import User
from .password_history import PasswordHistory
from .payment import Payment

__all__ = ['User', 'PasswordHistory', 'Payment']
