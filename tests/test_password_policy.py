"""Tests for the password policy engine"""
import pytest

from payportal.services.password_policy import (
    PasswordStrength,
    append_to_history,
    calculate_strength,
    has_sequential_run,
    is_unique,
    validate_strength,
)

HISTORY_PASSWORDS = ['Gr8!Horse%dx' % i for i in range(6)]


def test_common_password_rejected_despite_character_classes():
    result = validate_strength('Password1!')
    assert not result.is_valid
    assert 'Password is too common. Please choose a more secure password' in result.errors


@pytest.mark.parametrize('password', ['password', 'QWERTY', 'Monkey', 'letmein!!', '12345678'])
def test_common_passwords_case_insensitive(password):
    assert any('too common' in e for e in validate_strength(password).errors)


def test_strong_password_accepted():
    result = validate_strength('Tr0ub4dor&3xQz')
    assert result.is_valid
    assert result.errors == []
    assert result.strength in (PasswordStrength.STRONG, PasswordStrength.VERY_STRONG)


def test_weak_password_enumerates_every_reason():
    result = validate_strength('weak')
    assert not result.is_valid
    assert result.errors == [
        'Password must be at least 8 characters long',
        'Password must contain at least one uppercase letter',
        'Password must contain at least one number',
        'Password must contain at least one special character (!@#$%^&*()_+-=[]{};\':"\\|,.<>/?)',
    ]
    assert result.strength is PasswordStrength.WEAK


def test_too_long_password():
    result = validate_strength('Aa1!' * 33)
    assert result.errors == ['Password must not exceed 128 characters']


@pytest.mark.parametrize('password', ['Qabc!Zebra9', 'XyABCd!9Qw', 'Zebra!123Q', 'Mnxyz#44Rt'])
def test_ascending_runs_rejected(password):
    assert 'Password should not contain sequential characters' in validate_strength(password).errors


@pytest.mark.parametrize('password', ['Zeb987!Quill', 'Cba!Zebra9q', 'a1b2c3'])
def test_descending_or_broken_runs_allowed(password):
    assert not has_sequential_run(password)


def test_repeated_characters_rejected():
    result = validate_strength('Goood!Pass7')
    assert result.errors == ['Password should not contain repeated characters (e.g., "aaa", "111")']


def test_non_string_candidate_is_reported_not_raised():
    result = validate_strength(None)
    assert not result.is_valid
    assert result.strength is PasswordStrength.WEAK


@pytest.mark.parametrize('password, expected', [
    ('', PasswordStrength.WEAK),
    ('abcdefgh', PasswordStrength.WEAK),
    ('Abcdefg1', PasswordStrength.MEDIUM),
    ('Abcdefg1!', PasswordStrength.MEDIUM),
    ('Abcdefghij12', PasswordStrength.MEDIUM),
    ('Abcdefghijklmn12', PasswordStrength.STRONG),
    ('Abcdefgh12!x', PasswordStrength.VERY_STRONG),
])
def test_strength_scoring(password, expected):
    assert calculate_strength(password) is expected


def test_strength_result_serializes():
    payload = validate_strength('Tr0ub4dor&3xQz').to_dict()
    assert payload == {'is_valid': True, 'errors': [], 'strength': 'very-strong'}


def test_empty_history_is_unique(hasher):
    assert is_unique('Gr8!Horse0x', [], hasher)


def test_reuse_detected_in_full_history(hasher):
    history = []
    for password in HISTORY_PASSWORDS[:5]:
        history = append_to_history(history, hasher.hash(password))

    assert len(history) == 5
    for password in HISTORY_PASSWORDS[:5]:
        assert not is_unique(password, history, hasher)
    assert is_unique(HISTORY_PASSWORDS[5], history, hasher)


def test_sixth_push_evicts_oldest(hasher):
    history = [hasher.hash(p) for p in HISTORY_PASSWORDS[:5]]
    history = append_to_history(history, hasher.hash(HISTORY_PASSWORDS[5]))

    assert len(history) == 5
    assert is_unique(HISTORY_PASSWORDS[0], history, hasher)
    assert not is_unique(HISTORY_PASSWORDS[1], history, hasher)
    assert not is_unique(HISTORY_PASSWORDS[5], history, hasher)


def test_every_history_entry_is_checked():
    class CountingHasher:
        calls = 0

        def verify(self, secret, credential):
            self.calls += 1
            return credential == 'match'

    counting = CountingHasher()
    assert not is_unique('anything', ['match', 'b', 'c', 'd', 'e'], counting)
    assert counting.calls == 5


def test_append_to_history_does_not_mutate_input():
    original = ['a', 'b']
    assert append_to_history(original, 'c', capacity=2) == ['b', 'c']
    assert original == ['a', 'b']
