# payportal/models/payment.py
"""Payment model
International transfers created by portal clients
"""
from datetime import datetime
from payportal.extensions import db
from payportal.utils.security import generate_secure_token

PAYMENT_STATUSES = ('pending', 'processing', 'completed', 'failed', 'cancelled')


def new_transaction_id():
    return 'TXN' + generate_secure_token(8).upper()


class Payment(db.Model):
    """
    Money transfer from a client account to a beneficiary

    Only the transfer request is stored; settlement over the provider
    network happens elsewhere.
    """
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.String(32), unique=True, nullable=False,
                               index=True, default=new_transaction_id)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Transfer details
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False)
    provider = db.Column(db.String(20), nullable=False, default='SWIFT')

    # Beneficiary
    beneficiary_account_number = db.Column(db.String(18), nullable=False)
    beneficiary_name = db.Column(db.String(100))
    beneficiary_bank_name = db.Column(db.String(100))
    beneficiary_address = db.Column(db.String(200))
    swift_code = db.Column(db.String(11), nullable=False)

    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f'<Payment {self.transaction_id} status={self.status}>'

    def to_summary(self):
        return {
            'transactionId': self.transaction_id,
            'amount': str(self.amount),
            'currency': self.currency,
            'provider': self.provider,
            'status': self.status,
            'createdAt': self.created_at.isoformat(),
        }

    def to_dict(self):
        """Full view of the transfer for its owner"""
        payload = self.to_summary()
        payload.update({
            'beneficiaryAccountNumber': self.beneficiary_account_number,
            'beneficiaryName': self.beneficiary_name,
            'beneficiaryBankName': self.beneficiary_bank_name,
            'beneficiaryAddress': self.beneficiary_address,
            'swiftCode': self.swift_code,
            'updatedAt': self.updated_at.isoformat(),
        })
        return payload
