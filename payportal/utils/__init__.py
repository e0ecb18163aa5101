# payportal/utils/__init__.py
"""Security utilities: credential hashing and input validation"""
from .security import CredentialHasher, generate_secure_token
from .input_validation import (
    InjectionCheckResult,
    ValidationResult,
    WhitelistField,
    check_for_injection_patterns,
    sanitize,
    validate_against_whitelist,
)

__all__ = [
    'CredentialHasher',
    'generate_secure_token',
    'InjectionCheckResult',
    'ValidationResult',
    'WhitelistField',
    'check_for_injection_patterns',
    'sanitize',
    'validate_against_whitelist',
]
