# payportal/utils/security.py
"""Credential hashing for the PayPortal service
bcrypt over an HMAC-SHA256 peppered digest of the secret
"""
import hashlib
import hmac
import logging
import secrets

import bcrypt

from payportal.errors import ConfigurationError, HashingError

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
PEPPER_BYTES = 32


def generate_secure_token(length: int = 32) -> str:
    """
    Generate cryptographically secure random token

    Args:
        length: Number of bytes (will be hex-encoded, so output is 2x length)

    Returns:
        Hex-encoded secure random token
    """
    return secrets.token_hex(length)


def hash_with_pepper(data: str, pepper: str) -> str:
    """
    Mix the application-wide pepper into a secret using HMAC-SHA256

    The hex digest is 64 bytes long, which keeps every secret under
    bcrypt's 72-byte input limit no matter how long the secret or pepper is.

    Args:
        data: Secret to pepper
        pepper: Application-wide secret pepper

    Returns:
        Hex-encoded peppered digest
    """
    return hmac.new(
        pepper.encode('utf-8'),
        # Lone surrogates are valid JSON; keep them hashable
        data.encode('utf-8', 'surrogatepass'),
        hashlib.sha256
    ).hexdigest()


class CredentialHasher:
    """
    One-way derivation and constant-time verification of secrets

    The pepper is handed in by the caller; the hasher never reads it from
    the environment. Credentials are bcrypt strings, so cost and salt travel
    with every stored value and verification needs no other state.
    """

    def __init__(self, pepper: str, rounds: int = DEFAULT_ROUNDS):
        if not pepper:
            raise ConfigurationError('CredentialHasher requires a non-empty pepper')
        self._pepper = pepper
        self.rounds = rounds
        self._decoy = None

    @classmethod
    def from_config(cls, config) -> 'CredentialHasher':
        """
        Build a hasher from a Flask-style config mapping

        A missing PASSWORD_PEPPER is tolerated: an ephemeral pepper is
        generated and a warning logged, because every credential hashed with
        it becomes unverifiable once the process restarts. With
        PEPPER_REQUIRED set the missing pepper is a ConfigurationError.
        """
        pepper = (config.get('PASSWORD_PEPPER') or '').strip()
        rounds = int(config.get('BCRYPT_ROUNDS') or DEFAULT_ROUNDS)

        if not pepper:
            if config.get('PEPPER_REQUIRED'):
                raise ConfigurationError('PASSWORD_PEPPER is required but not configured')
            logger.warning(
                'PASSWORD_PEPPER is missing. Generating a temporary value. '
                'Passwords will break after restart.'
            )
            pepper = generate_secure_token(PEPPER_BYTES)

        return cls(pepper, rounds=rounds)

    def _peppered(self, secret: str) -> bytes:
        return hash_with_pepper(secret, self._pepper).encode('ascii')

    def hash(self, secret: str) -> str:
        """
        Derive a storable credential from a plain text secret

        Args:
            secret: Plain text password

        Returns:
            bcrypt credential string (algorithm, cost and salt embedded)

        Raises:
            HashingError: the bcrypt backend failed
        """
        if not isinstance(secret, str):
            raise TypeError('secret must be a string')

        peppered = self._peppered(secret)
        try:
            hashed = bcrypt.hashpw(peppered, bcrypt.gensalt(rounds=self.rounds))
        except Exception as exc:
            logger.error('Credential derivation failed: %s', type(exc).__name__)
            raise HashingError('Password hashing failed') from exc

        return hashed.decode('ascii')

    def verify(self, secret: str, credential: str) -> bool:
        """
        Verify a secret against a stored credential

        Args:
            secret: Plain text password to verify
            credential: Stored bcrypt credential

        Returns:
            True if the secret matches, False on mismatch or a malformed
            credential
        """
        if not isinstance(secret, str) or not isinstance(credential, str) or not credential:
            return False

        try:
            return bcrypt.checkpw(self._peppered(secret), credential.encode('utf-8'))
        except (ValueError, TypeError):
            return False

    def verify_decoy(self, secret: str) -> bool:
        """
        Spend one verification on a credential nobody knows

        Used when there is no account to check against, so that a rejected
        login takes as long whether or not the username exists.

        Returns:
            Always False
        """
        if self._decoy is None:
            self._decoy = self.hash(generate_secure_token(16))
        self.verify(secret, self._decoy)
        return False
