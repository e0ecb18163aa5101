"""Shared fixtures for the PayPortal test-suite"""
import pytest

from payportal import create_app
from payportal.extensions import db
from payportal.utils.security import CredentialHasher


@pytest.fixture()
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def hasher():
    # bcrypt's minimum cost keeps the suite fast
    return CredentialHasher('unit-test-pepper', rounds=4)


@pytest.fixture()
def registration():
    return {
        'username': 'jdoe_01',
        'fullname': 'Jane Doe',
        'idNumber': '9001015009087',
        'accountNumber': '12345678',
        'email': 'jane@example.com',
        'password': 'Str0ng!Pass99',
    }
