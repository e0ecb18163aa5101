# payportal/errors.py
"""Error taxonomy for the PayPortal credential security service

Expected bad input is never raised; it is reported through ValidationResult
objects. The exceptions below cover the three kinds of failure that abort a
request: validation flows the service layer must stop, configuration
mistakes, and operational failures of the hashing backend.
"""


class PayPortalError(Exception):
    """Base class for every error raised by the service"""


class ValidationFailure(PayPortalError):
    """Expected, user-facing rejection carrying every reason found"""

    def __init__(self, message, errors=None, status_code=400):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])
        self.status_code = status_code

    def to_dict(self):
        payload = {'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class ConfigurationError(PayPortalError):
    """Programmer or deployment error (unknown field, missing secret)"""


class OperationalFailure(PayPortalError):
    """Infrastructure failure; never reported as invalid credentials"""


class HashingError(OperationalFailure):
    """Raised when credential derivation fails inside the hashing backend"""
