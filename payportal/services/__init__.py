# payportal/services/__init__.py
"""Service layer for business logic"""
from .auth_service import AuthService
from .password_policy import PasswordStrength, StrengthResult, is_unique, validate_strength
from .payment_service import PaymentService

__all__ = ['AuthService', 'PasswordStrength', 'PaymentService', 'StrengthResult', 'is_unique', 'validate_strength']
