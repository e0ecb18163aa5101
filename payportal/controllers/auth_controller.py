# payportal/controllers/auth_controller.py
"""Authentication Controller for the PayPortal client portal
JSON endpoints for registration, login, password change and recovery
"""
from flask import Blueprint, current_app, g, jsonify, request, session

from payportal.errors import ValidationFailure
from payportal.services.auth_service import AuthService
from payportal.utils.decorators import login_required
from payportal.utils.input_validation import whitelist_rules

auth_bp = Blueprint('auth', __name__)

RECOVERY_SENT = 'If an account with that email exists, a recovery code has been sent'
USERNAME_SENT = 'If an account with that email exists, the username has been sent'


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailure('Invalid or missing request body',
                                ["Send a JSON payload with header 'Content-Type: application/json'"])
    return data


@auth_bp.route('/register', methods=['POST'])
def register():
    """CREATE: client registration"""
    user, strength = AuthService.register_user(json_body())
    return jsonify({
        'message': 'User created successfully',
        'user': user.to_summary(),
        'security': {
            'passwordStrength': strength.strength.value,
            'lastPasswordChange': user.last_password_change.isoformat(),
        },
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """READ: authenticate and open a signed session"""
    user = AuthService.authenticate(json_body())

    session.clear()
    session['user_id'] = user.id
    session['username'] = user.username
    session.permanent = True

    return jsonify({'message': 'Login successful', 'user': user.to_summary()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """UPDATE: password rotation with history check"""
    data = json_body()
    user = g.current_user
    strength = AuthService.change_password(user, data.get('currentPassword'), data.get('newPassword'))
    return jsonify({
        'message': 'Password changed successfully',
        'security': {
            'lastPasswordChange': user.last_password_change.isoformat(),
            'passwordStrength': strength.strength.value,
        },
    })


@auth_bp.route('/recover-password', methods=['POST'])
def recover_password():
    """Issue a recovery code; the response never reveals whether the email exists"""
    email = json_body().get('email')
    if not email:
        raise ValidationFailure('Email is required')

    user, code = AuthService.issue_recovery_code(email)
    payload = {'message': RECOVERY_SENT}
    if user and current_app.config['RECOVERY_CODE_IN_RESPONSE']:
        payload['developmentOnly'] = {
            'recoveryCode': code,
            'expiresAt': user.recovery_code_expires.isoformat(),
        }
    return jsonify(payload)


@auth_bp.route('/verify-recovery-code', methods=['POST'])
def verify_recovery_code():
    data = json_body()
    AuthService.verify_recovery_code(data.get('email'), data.get('recoveryCode'))
    return jsonify({'message': 'Recovery code verified successfully'})


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = json_body()
    AuthService.reset_password(data.get('email'), data.get('recoveryCode'), data.get('newPassword'))
    return jsonify({
        'message': 'Password has been reset successfully. Please login with your new password.'
    })


@auth_bp.route('/recover-username', methods=['POST'])
def recover_username():
    user = AuthService.find_by_email(json_body().get('email'))
    payload = {'message': USERNAME_SENT}
    if user and current_app.config['RECOVERY_CODE_IN_RESPONSE']:
        payload['developmentOnly'] = {'username': user.username}
    return jsonify(payload)


@auth_bp.route('/validation-rules', methods=['GET'])
def validation_rules():
    """Whitelist grammars for client-side mirrors"""
    return jsonify(whitelist_rules())
