# payportal/extensions.py
"""Flask extensions initialization"""
from flask import current_app
from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

HASHER_EXTENSION_KEY = 'credential_hasher'


def get_hasher():
    """Return the CredentialHasher bound to the running application"""
    return current_app.extensions[HASHER_EXTENSION_KEY]
