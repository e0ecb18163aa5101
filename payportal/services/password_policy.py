# payportal/services/password_policy.py
"""Password policy engine
Strength rules, strength scoring and non-reuse against a bounded history
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, TypeVar

from payportal.utils.input_validation import ValidationResult

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
PASSWORD_HISTORY_COUNT = 5

T = TypeVar('T')

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

COMMON_PASSWORDS = frozenset([
    'password', 'password123', '12345678', 'qwerty', 'abc123',
    'monkey', '1234567', 'letmein', 'trustno1', 'dragon',
    'baseball', 'iloveyou', 'master', 'sunshine', 'ashley',
    'bailey', 'passw0rd', 'shadow', '123123', '654321',
])

_RE_UPPER = re.compile(r"[A-Z]")
_RE_LOWER = re.compile(r"[a-z]")
_RE_DIGIT = re.compile(r"[0-9]")
_RE_SPECIAL = re.compile('[' + re.escape(SPECIAL_CHARACTERS) + ']')
_RE_REPEATED = re.compile(r"(.)\1{2,}", re.DOTALL)
_RE_DECORATION = re.compile(r"^[^a-z]+|[^a-z]+$")


class PasswordStrength(str, Enum):
    WEAK = 'weak'
    MEDIUM = 'medium'
    STRONG = 'strong'
    VERY_STRONG = 'very-strong'


@dataclass
class StrengthResult(ValidationResult):
    strength: PasswordStrength = PasswordStrength.WEAK

    def to_dict(self):
        payload = super().to_dict()
        payload['strength'] = self.strength.value
        return payload


def _is_common(password: str) -> bool:
    lowered = password.lower()
    if lowered in COMMON_PASSWORDS:
        return True
    # "Password1!" is the decorated form of "password"
    core = _RE_DECORATION.sub('', lowered)
    return bool(core) and core in COMMON_PASSWORDS


def has_sequential_run(password: str, run_length: int = 3) -> bool:
    """True when the password holds an ascending letter or digit run like 'abc' or '123'"""
    lowered = password.lower()
    for start in range(len(lowered) - run_length + 1):
        window = lowered[start:start + run_length]
        same_class = all(c.isdigit() and c.isascii() for c in window) or \
            all('a' <= c <= 'z' for c in window)
        if not same_class:
            continue
        if all(ord(window[i + 1]) - ord(window[i]) == 1 for i in range(run_length - 1)):
            return True
    return False


def calculate_strength(password: str) -> PasswordStrength:
    """Map a password onto the four-level strength scale"""
    if not password:
        return PasswordStrength.WEAK

    score = 0
    length = len(password)

    # Length tiers
    score += sum(1 for tier in (8, 12, 16) if length >= tier)

    # Character variety
    classes = [
        bool(_RE_LOWER.search(password)),
        bool(_RE_UPPER.search(password)),
        bool(_RE_DIGIT.search(password)),
        bool(_RE_SPECIAL.search(password)),
    ]
    score += sum(classes)

    # Additional complexity
    if length >= 12 and all(classes):
        score += 1

    if score <= 3:
        return PasswordStrength.WEAK
    if score <= 5:
        return PasswordStrength.MEDIUM
    if score <= 6:
        return PasswordStrength.STRONG
    return PasswordStrength.VERY_STRONG


def validate_strength(password: str,
                      min_length: int = MIN_PASSWORD_LENGTH,
                      max_length: int = MAX_PASSWORD_LENGTH) -> StrengthResult:
    """
    Check a candidate password against every strength rule

    Rules are independent: a password failing several of them gets one
    error per rule, in a stable order.

    Args:
        password: Candidate password
        min_length: Minimum accepted length
        max_length: Maximum accepted length

    Returns:
        StrengthResult carrying the errors and the strength level
    """
    password = password if isinstance(password, str) else ''
    errors = []

    if len(password) < min_length:
        errors.append(f'Password must be at least {min_length} characters long')

    if len(password) > max_length:
        errors.append(f'Password must not exceed {max_length} characters')

    if not _RE_UPPER.search(password):
        errors.append('Password must contain at least one uppercase letter')

    if not _RE_LOWER.search(password):
        errors.append('Password must contain at least one lowercase letter')

    if not _RE_DIGIT.search(password):
        errors.append('Password must contain at least one number')

    if not _RE_SPECIAL.search(password):
        errors.append(f'Password must contain at least one special character ({SPECIAL_CHARACTERS})')

    if _is_common(password):
        errors.append('Password is too common. Please choose a more secure password')

    if has_sequential_run(password):
        errors.append('Password should not contain sequential characters')

    if _RE_REPEATED.search(password):
        errors.append('Password should not contain repeated characters (e.g., "aaa", "111")')

    return StrengthResult(
        is_valid=not errors,
        errors=errors,
        strength=calculate_strength(password),
    )


def is_unique(password: str, history: Sequence[str], hasher) -> bool:
    """
    Check that a password matches none of the credentials in a history

    Every entry is verified, even after a match, so the time taken depends
    only on the history length.

    Args:
        password: Candidate password
        history: Stored credentials, oldest first
        hasher: CredentialHasher that produced the credentials

    Returns:
        True if the history is empty or no entry matches
    """
    if not history:
        return True
    matches = [hasher.verify(password, credential) for credential in history]
    return not any(matches)


def append_to_history(history: Iterable[T], credential: T,
                      capacity: int = PASSWORD_HISTORY_COUNT) -> List[T]:
    """Return a new history with the credential appended, oldest evicted beyond capacity"""
    updated = list(history)
    updated.append(credential)
    if len(updated) > capacity:
        updated = updated[len(updated) - capacity:]
    return updated
