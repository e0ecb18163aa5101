# payportal/services/auth_service.py
"""Authentication service for the PayPortal client portal
Registration, login, password change and recovery flows over the models
"""
import logging
import secrets
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from payportal.errors import ValidationFailure
from payportal.extensions import db, get_hasher
from payportal.models.password_history import PasswordHistory
from payportal.models.user import User
from payportal.services.password_policy import (
    append_to_history,
    is_unique,
    validate_strength,
)
from payportal.utils.input_validation import (
    check_for_injection_patterns,
    sanitize,
    validate_login_input,
    validate_registration_input,
)

logger = logging.getLogger(__name__)

REGISTRATION_FIELDS = ['username', 'fullname', 'idNumber', 'accountNumber', 'email', 'password']
LOGIN_FIELDS = ['username', 'accountNumber', 'password']

INVALID_CREDENTIALS = 'Invalid credentials'
INVALID_RECOVERY_CODE = 'Invalid or expired recovery code'


def _require_fields(data, fields):
    missing = [name for name in fields if not data.get(name)]
    if missing:
        raise ValidationFailure('All fields are required',
                                [f'{name} is required' for name in missing])


def commit_session(action, username):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('%s failed for user %s', action, username)
        raise


class AuthService:
    """Handles authentication operations"""

    @staticmethod
    def check_new_password(password):
        """Strength rules for a new password, limits taken from the app config"""
        result = validate_strength(
            password,
            min_length=current_app.config['PASSWORD_MIN_LENGTH'],
            max_length=current_app.config['PASSWORD_MAX_LENGTH'],
        )
        if not result.is_valid:
            raise ValidationFailure('Password does not meet security requirements', result.errors)
        return result

    @staticmethod
    def is_password_in_history(user, new_password):
        """Check if password matches the current credential or any history entry"""
        credentials = user.history_credentials()
        if user.password_hash not in credentials:
            credentials.append(user.password_hash)
        return not is_unique(new_password, credentials, get_hasher())

    @staticmethod
    def record_password_history(user, credential):
        """Append a credential to the user's history, evicting the oldest beyond the limit"""
        capacity = current_app.config['PASSWORD_HISTORY_COUNT']
        entry = PasswordHistory(password_hash=credential)

        kept = append_to_history(user.password_history, entry, capacity)
        for old in [e for e in user.password_history if e not in kept]:
            # delete-orphan cascade removes the row
            user.password_history.remove(old)
        user.password_history.append(entry)

    @staticmethod
    def set_password(user, new_password):
        """Hash and store a new password, recording it in the history"""
        credential = get_hasher().hash(new_password)
        user.password_hash = credential
        user.last_password_change = datetime.utcnow()
        AuthService.record_password_history(user, credential)

    @staticmethod
    def register_user(data):
        """
        CREATE: register a portal client

        Args:
            data: Mapping with username, fullname, idNumber, accountNumber,
                email and password

        Returns:
            Tuple of (user, StrengthResult)

        Raises:
            ValidationFailure: any field or the password is rejected
        """
        _require_fields(data, REGISTRATION_FIELDS)

        # Whitelist every identity field
        input_validation = validate_registration_input(data)
        if not input_validation.is_valid:
            raise ValidationFailure('Input validation failed', input_validation.errors)

        # Blacklist layer for the one free-form field
        password = data['password']
        injection_check = check_for_injection_patterns(password)
        if not injection_check.is_safe:
            raise ValidationFailure('Password contains prohibited patterns', injection_check.threats)

        strength = AuthService.check_new_password(password)

        username = sanitize(data['username'])
        email = sanitize(data['email'])

        if User.query.filter_by(email=email).first():
            raise ValidationFailure('Email already exists', ['email'])

        if User.query.filter_by(username=username).first():
            raise ValidationFailure('Username already exists', ['username'])

        user = User(
            username=username,
            fullname=sanitize(data['fullname']),
            id_number=sanitize(data['idNumber']),
            account_number=sanitize(data['accountNumber']),
            email=email,
            account_type='client',
        )
        AuthService.set_password(user, password)

        db.session.add(user)
        commit_session('Registration', username)

        logger.info('New user registered: %s', username)
        return user, strength

    @staticmethod
    def authenticate(data):
        """
        READ: authenticate a client by username, account number and password

        Raises:
            ValidationFailure: malformed input (400) or wrong credentials (401)
        """
        _require_fields(data, LOGIN_FIELDS)

        input_validation = validate_login_input(data)
        if not input_validation.is_valid:
            raise ValidationFailure('Input validation failed', input_validation.errors)

        password = data['password']
        if not check_for_injection_patterns(password).is_safe:
            raise ValidationFailure(INVALID_CREDENTIALS)

        username = sanitize(data['username'])
        user = User.query.filter_by(username=username, is_active=True).first()
        if not user or user.account_number != sanitize(data['accountNumber']):
            # Same bcrypt cost as a real mismatch
            get_hasher().verify_decoy(password)
            raise ValidationFailure(INVALID_CREDENTIALS, status_code=401)

        if not get_hasher().verify(password, user.password_hash):
            logger.info('Failed login for user %s', username)
            raise ValidationFailure(INVALID_CREDENTIALS, status_code=401)

        logger.info('User logged in: %s', username)
        return user

    @staticmethod
    def change_password(user, current_password, new_password):
        """
        UPDATE: rotate the password of an authenticated user

        Returns:
            StrengthResult of the new password
        """
        _require_fields({'currentPassword': current_password, 'newPassword': new_password},
                        ['currentPassword', 'newPassword'])

        if not get_hasher().verify(current_password, user.password_hash):
            raise ValidationFailure('Current password is incorrect', status_code=401)

        strength = AuthService.check_new_password(new_password)

        if AuthService.is_password_in_history(user, new_password):
            count = current_app.config['PASSWORD_HISTORY_COUNT']
            raise ValidationFailure(f'Cannot reuse any of your last {count} passwords')

        AuthService.set_password(user, new_password)
        commit_session('Password change', user.username)

        logger.info('Password changed for user: %s', user.username)
        return strength

    @staticmethod
    def issue_recovery_code(email):
        """
        Generate a 6-digit recovery code for the account owning an email

        Returns:
            Tuple of (user, code); (None, None) when no account matches
        """
        user = User.query.filter_by(email=sanitize(email)).first()
        if not user:
            return None, None

        ttl = current_app.config['RECOVERY_CODE_TTL_MINUTES']
        code = str(100000 + secrets.randbelow(900000))
        user.recovery_code = code
        user.recovery_code_expires = datetime.utcnow() + timedelta(minutes=ttl)
        commit_session('Recovery code issue', user.username)

        logger.info('Password recovery code issued for user: %s', user.username)
        return user, code

    @staticmethod
    def verify_recovery_code(email, code):
        """Return the user owning a valid, unexpired recovery code"""
        if not email or not code:
            raise ValidationFailure('Email and recovery code are required')

        user = User.query.filter_by(email=sanitize(email)).first()
        if not user or not user.has_valid_recovery_code(code):
            raise ValidationFailure(INVALID_RECOVERY_CODE)
        return user

    @staticmethod
    def reset_password(email, code, new_password):
        """Reset a password through a recovery code"""
        if not email or not code or not new_password:
            raise ValidationFailure('All fields are required')

        user = AuthService.verify_recovery_code(email, code)
        AuthService.check_new_password(new_password)

        if AuthService.is_password_in_history(user, new_password):
            raise ValidationFailure('Password was used recently. Please choose a different password.')

        AuthService.set_password(user, new_password)
        user.clear_recovery_code()
        commit_session('Password reset', user.username)

        logger.info('Password reset successful for user: %s', user.username)
        return user

    @staticmethod
    def find_by_email(email):
        if not email:
            raise ValidationFailure('Email is required')
        return User.query.filter_by(email=sanitize(email)).first()
