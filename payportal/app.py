# payportal/app.py
"""Application factory for the PayPortal credential security service"""
import logging

import click
from flask import Flask, jsonify
from flask.logging import default_handler

from payportal.config import config
from payportal.errors import ConfigurationError, OperationalFailure, ValidationFailure
from payportal.extensions import HASHER_EXTENSION_KEY, db
from payportal.services import password_policy
from payportal.utils.security import CredentialHasher

logger = logging.getLogger(__name__)


def create_app(config_name='default', overrides=None):
    """Create and configure Flask application"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    if not app.config.get('SECRET_KEY'):
        raise ConfigurationError('SECRET_KEY must be set')

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    app.extensions[HASHER_EXTENSION_KEY] = CredentialHasher.from_config(app.config)

    # Register blueprints
    from payportal.controllers.auth_controller import auth_bp
    from payportal.controllers.payment_controller import payments_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(payments_bp, url_prefix='/payments')

    register_error_handlers(app)
    register_commands(app)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def configure_logging(app):
    """Route the package loggers through Flask's handler"""
    package_logger = logging.getLogger('payportal')
    package_logger.setLevel(logging.DEBUG if app.debug else logging.INFO)
    if default_handler not in package_logger.handlers:
        package_logger.addHandler(default_handler)


def register_error_handlers(app):
    """Register error handlers"""
    @app.errorhandler(ValidationFailure)
    def validation_failure(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(OperationalFailure)
    def operational_failure(error):
        db.session.rollback()
        logger.error('Operational failure: %s', error)
        return jsonify({'message': 'An internal error occurred. Please try again.'}), 500

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'message': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'message': 'Internal server error'}), 500


def register_commands(app):
    """Register CLI commands"""
    @app.cli.command('init-db')
    def init_db():
        """Initialize database tables"""
        db.create_all()
        click.echo('Database initialized successfully')

    @app.cli.command('validate-compliance')
    def validate_compliance():
        """Check the configured password policy against the portal requirements"""
        problems = compliance_problems(app.config)
        for problem in problems:
            click.echo(f'x {problem}', err=True)
        if problems:
            raise click.exceptions.Exit(1)
        click.echo('Password policy compliance verified')


def compliance_problems(app_config):
    """List every way the configured policy falls short of the portal requirements"""
    problems = []
    if app_config['PASSWORD_HISTORY_COUNT'] < password_policy.PASSWORD_HISTORY_COUNT:
        problems.append('Non-compliant history depth')
    if app_config['PASSWORD_MIN_LENGTH'] < password_policy.MIN_PASSWORD_LENGTH:
        problems.append('Non-compliant minimum password length')
    if app_config['PASSWORD_MAX_LENGTH'] > password_policy.MAX_PASSWORD_LENGTH:
        problems.append('Non-compliant maximum password length')
    if not app_config.get('TESTING') and app_config['BCRYPT_ROUNDS'] < 10:
        problems.append('Non-compliant bcrypt cost')
    if not app_config.get('PASSWORD_PEPPER'):
        problems.append('PASSWORD_PEPPER is not configured; credentials will not survive a restart')
    return problems
