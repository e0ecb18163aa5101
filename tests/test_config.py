"""Test configuration loading"""
import logging

import pytest

from payportal import create_app
from payportal.app import compliance_problems
from payportal.errors import ConfigurationError
from payportal.extensions import get_hasher

IN_MEMORY = {'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'}


def test_development_config():
    """Verify development configuration loads correctly"""
    app = create_app('development', overrides=IN_MEMORY)
    assert app.config['DEBUG'] is True
    assert app.config['BCRYPT_ROUNDS'] >= 10
    assert app.config['PASSWORD_HISTORY_COUNT'] == 5
    assert 'SECRET_KEY' in app.config


def test_testing_config_uses_injected_pepper(app):
    with app.app_context():
        hasher = get_hasher()
    assert hasher.rounds == 4
    assert hasher.verify('Str0ng!Pass99', hasher.hash('Str0ng!Pass99'))


def test_missing_pepper_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger='payportal'):
        create_app('testing', overrides={'PASSWORD_PEPPER': None})
    assert 'PASSWORD_PEPPER is missing' in caplog.text


def test_required_pepper_fails_loudly():
    with pytest.raises(ConfigurationError):
        create_app('testing', overrides={'PASSWORD_PEPPER': '', 'PEPPER_REQUIRED': True})


def test_production_requires_secret_key():
    with pytest.raises(ConfigurationError):
        create_app('production', overrides={'SECRET_KEY': None})


def test_compliance_of_default_policy(app):
    assert compliance_problems(app.config) == []


def test_compliance_flags_shallow_history(app):
    app.config['PASSWORD_HISTORY_COUNT'] = 3
    assert compliance_problems(app.config) == ['Non-compliant history depth']


def test_validate_compliance_command(app):
    result = app.test_cli_runner().invoke(args=['validate-compliance'])
    assert result.exit_code == 0
    assert 'compliance verified' in result.output
