# payportal/utils/input_validation.py
"""Input sanitizing and whitelist validation

Every identity field accepted by the portal has a fixed grammar. The grammar
table is the server-authoritative copy; client mirrors are generated from
whitelist_rules() and checked against tests/fixtures/whitelist_cases.json.
The injection blacklist is a heuristic second layer behind the grammars.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from payportal.errors import ConfigurationError


@dataclass
class ValidationResult:
    """Outcome of a validation; errors keep the order they were found in"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors):
        errors = list(errors)
        return cls(is_valid=not errors, errors=errors)

    def to_dict(self):
        return {'is_valid': self.is_valid, 'errors': list(self.errors)}


@dataclass
class InjectionCheckResult:
    is_safe: bool
    threats: List[str] = field(default_factory=list)


class WhitelistField(Enum):
    """Closed set of field grammars shared by every validator instance"""

    ALPHANUMERIC = ('alphanumeric', r"[a-zA-Z0-9_-]+",
                    'letters, digits, underscores or hyphens')
    USERNAME = ('username', r"[a-zA-Z0-9_]{4,20}",
                '4-20 letters, digits or underscores')
    EMAIL = ('email', r"[^\s@]+@[^\s@]+\.[^\s@]+",
             'an address of the form name@domain.tld')
    ID_NUMBER = ('idNumber', r"[0-9]{5,20}",
                 '5-20 digits')
    ACCOUNT_NUMBER = ('accountNumber', r"[0-9]{8,18}",
                      '8-18 digits')
    ADDRESS = ('address', r"[a-zA-Z0-9\s,.'-]{5,100}",
               "5-100 letters, digits, spaces or , . ' -")
    FULLNAME = ('fullname', r"[a-zA-Z\s.'-]{2,50}",
                "2-50 letters, spaces or . ' -")
    CURRENCY = ('currency', r"[A-Z]{3}",
                'a 3-letter uppercase ISO currency code')
    SWIFT_CODE = ('swiftCode', r"[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?",
                  '8 or 11 characters: 6 uppercase letters, then 2 or 5 uppercase letters or digits')

    def __init__(self, field_name, pattern, description):
        self.field_name = field_name
        self.pattern = pattern
        self.description = description
        self.regex = re.compile(pattern)

    @classmethod
    def from_name(cls, name: str) -> 'WhitelistField':
        """Look a field up by its wire name (e.g. 'accountNumber')"""
        for member in cls:
            if member.field_name == name:
                return member
        raise ConfigurationError(f'Unknown whitelist type: {name}')


# (label, pattern) pairs; every match is reported, not only the first
INJECTION_PATTERNS = [
    ('sql', r"(;|\b(SELECT|UPDATE|DELETE|INSERT|DROP|ALTER|CREATE|TRUNCATE)\b)"),
    ('nosql', r"(\$where|\$regex|\$gt|\$lt|\$ne|\$in|\$nin|\$or|\$and)"),
    ('xss', r"<script[^>]*>|onerror=|onload=|javascript:"),
    ('command', r"(&&|\|\||\b(cat|ls|rm|touch|curl|wget)\b)"),
    ('path_traversal', r"(\.\./|\.\.\\|/[A-Za-z0-9_-]+/)"),
    ('null_byte', r"\x00"),
]

_CASE_SENSITIVE = {'path_traversal', 'null_byte'}

# ASCII word boundaries, the same as the client-side mirror
_COMPILED_INJECTION_PATTERNS = [
    (label, re.compile(pattern, re.ASCII if label in _CASE_SENSITIVE else re.ASCII | re.IGNORECASE))
    for label, pattern in INJECTION_PATTERNS
]

_STRIPPED_CHARS = re.compile(r"[<>\x00]")

REGISTRATION_FIELDS = [
    WhitelistField.USERNAME,
    WhitelistField.FULLNAME,
    WhitelistField.ID_NUMBER,
    WhitelistField.ACCOUNT_NUMBER,
    WhitelistField.EMAIL,
]

LOGIN_FIELDS = [
    WhitelistField.USERNAME,
    WhitelistField.ACCOUNT_NUMBER,
]


def _as_text(value) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def sanitize(raw) -> str:
    """Strip angle brackets and NUL bytes, then trim surrounding whitespace"""
    # Removal can expose new edge whitespace, so strip after removing
    return _STRIPPED_CHARS.sub('', _as_text(raw)).strip()


def validate_against_whitelist(value, field_type: Union[WhitelistField, str]) -> ValidationResult:
    """
    Validate a value against the grammar of a whitelisted field

    Args:
        value: Untrusted input; surrounding whitespace is ignored
        field_type: WhitelistField member or its wire name

    Returns:
        ValidationResult with a single error describing the grammar on failure

    Raises:
        ConfigurationError: field_type names no known grammar
    """
    if not isinstance(field_type, WhitelistField):
        field_type = WhitelistField.from_name(field_type)

    text = _as_text(value).strip()
    if field_type.regex.fullmatch(text):
        return ValidationResult(is_valid=True)
    return ValidationResult(
        is_valid=False,
        errors=[f'Invalid {field_type.field_name}: must be {field_type.description}'],
    )


def check_for_injection_patterns(value) -> InjectionCheckResult:
    """Report every injection signature found in the value"""
    text = _as_text(value)
    threats = [label for label, regex in _COMPILED_INJECTION_PATTERNS if regex.search(text)]
    return InjectionCheckResult(is_safe=not threats, threats=threats)


def _validate_fields(data: Mapping, fields) -> ValidationResult:
    errors = []
    for whitelist_field in fields:
        raw = data.get(whitelist_field.field_name)
        if raw is None or _as_text(raw).strip() == '':
            errors.append(f'{whitelist_field.field_name} is required')
            continue
        result = validate_against_whitelist(sanitize(raw), whitelist_field)
        errors.extend(result.errors)
    return ValidationResult.from_errors(errors)


def validate_registration_input(data: Mapping) -> ValidationResult:
    """Sanitize and whitelist every identity field of a registration"""
    return _validate_fields(data, REGISTRATION_FIELDS)


def validate_login_input(data: Mapping) -> ValidationResult:
    """Sanitize and whitelist the username and account number of a login"""
    return _validate_fields(data, LOGIN_FIELDS)


def whitelist_rules(fields: Optional[List[WhitelistField]] = None) -> Dict[str, Dict[str, str]]:
    """Grammar table published to client-side mirrors"""
    return {
        member.field_name: {'pattern': member.pattern, 'description': member.description}
        for member in (fields or list(WhitelistField))
    }
