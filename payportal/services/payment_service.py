# payportal/services/payment_service.py
"""Payment service for the PayPortal client portal
Validates and records international transfers for authenticated clients
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from payportal.errors import ValidationFailure
from payportal.extensions import db
from payportal.models.payment import PAYMENT_STATUSES, Payment
from payportal.services.auth_service import commit_session
from payportal.utils.input_validation import (
    WhitelistField,
    check_for_injection_patterns,
    sanitize,
    validate_against_whitelist,
)

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = [
    {'code': 'USD', 'name': 'US Dollar', 'symbol': '$'},
    {'code': 'EUR', 'name': 'Euro', 'symbol': '€'},
    {'code': 'GBP', 'name': 'British Pound', 'symbol': '£'},
    {'code': 'JPY', 'name': 'Japanese Yen', 'symbol': '¥'},
    {'code': 'CAD', 'name': 'Canadian Dollar', 'symbol': 'C$'},
    {'code': 'AUD', 'name': 'Australian Dollar', 'symbol': 'A$'},
    {'code': 'CHF', 'name': 'Swiss Franc', 'symbol': 'CHF'},
    {'code': 'CNY', 'name': 'Chinese Yuan', 'symbol': '¥'},
    {'code': 'SEK', 'name': 'Swedish Krona', 'symbol': 'kr'},
    {'code': 'NZD', 'name': 'New Zealand Dollar', 'symbol': 'NZ$'},
    {'code': 'ZAR', 'name': 'South African Rand', 'symbol': 'R'},
]

SUPPORTED_PROVIDERS = [
    {
        'code': 'SWIFT',
        'name': 'SWIFT Network',
        'description': 'Society for Worldwide Interbank Financial Telecommunication',
        'fees': 'Variable based on amount and destination',
    },
]

REQUIRED_FIELDS = ['amount', 'currency', 'beneficiaryAccountNumber', 'swiftCode']
# Free-text beneficiary details and their column widths
FREE_TEXT_FIELDS = {'beneficiaryName': 100, 'beneficiaryBankName': 100, 'beneficiaryAddress': 200}

MAX_AMOUNT = Decimal('9999999999999999.99')
INVALID_TRANSACTION_ID = 'Invalid transactionId'
PAYMENT_NOT_FOUND = 'Payment not found'


def parse_amount(raw):
    """Positive amount with at most two decimal places, as a Decimal"""
    # bool is an int; JSON true is not an amount
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise ValidationFailure('Amount must be a number')
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationFailure('Amount must be a number')

    if not amount.is_finite():
        raise ValidationFailure('Amount must be a number')
    if amount <= 0:
        raise ValidationFailure('Amount must be greater than 0')
    if amount > MAX_AMOUNT:
        raise ValidationFailure('Amount is too large')
    if amount != amount.quantize(Decimal('0.01')):
        raise ValidationFailure('Amount must have at most 2 decimal places')
    return amount.quantize(Decimal('0.01'))


def _check_transaction_id(transaction_id):
    if not validate_against_whitelist(transaction_id, WhitelistField.ALPHANUMERIC).is_valid \
            or not check_for_injection_patterns(transaction_id).is_safe:
        raise ValidationFailure(INVALID_TRANSACTION_ID)


class PaymentService:
    """Handles payment operations of an authenticated client"""

    @staticmethod
    def create_payment(user, data):
        """
        CREATE: record a transfer to a beneficiary

        Args:
            user: Authenticated client making the transfer
            data: Mapping with amount, currency, beneficiaryAccountNumber and
                swiftCode; beneficiaryName, beneficiaryBankName,
                beneficiaryAddress and provider are optional

        Returns:
            The persisted Payment

        Raises:
            ValidationFailure: a field is missing, malformed or unsafe
        """
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, '')]
        if missing:
            raise ValidationFailure(
                'Amount, currency, beneficiary account number, and SWIFT code are required',
                [f'{name} is required' for name in missing],
            )

        amount = parse_amount(data['amount'])

        account_number = sanitize(data['beneficiaryAccountNumber'])
        if not validate_against_whitelist(account_number, WhitelistField.ACCOUNT_NUMBER).is_valid:
            raise ValidationFailure('Invalid beneficiary account number')

        currency = sanitize(data['currency'])
        if not validate_against_whitelist(currency, WhitelistField.CURRENCY).is_valid:
            raise ValidationFailure('Invalid currency code')
        if currency not in {c['code'] for c in SUPPORTED_CURRENCIES}:
            raise ValidationFailure(f'Unsupported currency: {currency}')

        provider = sanitize(data.get('provider') or 'SWIFT').upper()
        if provider not in {p['code'] for p in SUPPORTED_PROVIDERS}:
            raise ValidationFailure('Unsupported payment provider')

        # Blacklist layer for the free-text beneficiary details
        threats = []
        for name in FREE_TEXT_FIELDS:
            for threat in check_for_injection_patterns(data.get(name)).threats:
                if threat not in threats:
                    threats.append(threat)
        if threats:
            raise ValidationFailure('Input validation failed', threats)

        too_long = [f'{name} must not exceed {limit} characters'
                    for name, limit in FREE_TEXT_FIELDS.items()
                    if len(sanitize(data.get(name))) > limit]
        if too_long:
            raise ValidationFailure('Input validation failed', too_long)

        swift_code = sanitize(data['swiftCode']).upper()
        swift_check = validate_against_whitelist(swift_code, WhitelistField.SWIFT_CODE)
        if not swift_check.is_valid:
            raise ValidationFailure(f'Invalid SWIFT code format: {swift_code}', swift_check.errors)

        payment = Payment(
            user_id=user.id,
            amount=amount,
            currency=currency,
            provider=provider,
            beneficiary_account_number=account_number,
            beneficiary_name=sanitize(data.get('beneficiaryName')) or None,
            beneficiary_bank_name=sanitize(data.get('beneficiaryBankName')) or None,
            beneficiary_address=sanitize(data.get('beneficiaryAddress')) or None,
            swift_code=swift_code,
            status='pending',
        )
        db.session.add(payment)
        commit_session('Payment creation', user.username)

        logger.info('Payment %s created for user %s', payment.transaction_id, user.username)
        return payment

    @staticmethod
    def payments_for(user):
        """READ: the client's payments, newest first"""
        return Payment.query.filter_by(user_id=user.id).order_by(
            Payment.created_at.desc(), Payment.id.desc()
        ).all()

    @staticmethod
    def get_payment(user, transaction_id):
        """READ: one payment owned by the client"""
        _check_transaction_id(transaction_id)
        payment = Payment.query.filter_by(transaction_id=transaction_id, user_id=user.id).first()
        if not payment:
            raise ValidationFailure(PAYMENT_NOT_FOUND, status_code=404)
        return payment

    @staticmethod
    def update_status(user, transaction_id, status):
        """UPDATE: move a payment owned by the client to a new status"""
        _check_transaction_id(transaction_id)
        if status not in PAYMENT_STATUSES:
            raise ValidationFailure('Invalid status', [f'status must be one of: {", ".join(PAYMENT_STATUSES)}'])

        payment = PaymentService.get_payment(user, transaction_id)
        payment.status = status
        payment.updated_at = datetime.utcnow()
        commit_session('Payment status update', user.username)

        logger.info('Payment %s moved to %s by user %s', transaction_id, status, user.username)
        return payment
