"""User model for the PayPortal client portal"""
import hmac
from datetime import datetime
from payportal.extensions import db


class User(db.Model):
    """Portal client with peppered bcrypt credential storage"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(20), unique=True, nullable=False, index=True)
    fullname = db.Column(db.String(50), nullable=False)
    id_number = db.Column(db.String(20), nullable=False)
    # Kept as text so leading zeros survive
    account_number = db.Column(db.String(18), nullable=False)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    account_type = db.Column(db.String(20), nullable=False, default='client')

    password_hash = db.Column(db.String(60), nullable=False)
    last_password_change = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Password recovery
    recovery_code = db.Column(db.String(6), nullable=True)
    recovery_code_expires = db.Column(db.DateTime, nullable=True)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Oldest first, so the list reads as the FIFO history
    password_history = db.relationship('PasswordHistory', backref='user',
                                       lazy=True, cascade='all, delete-orphan',
                                       order_by='PasswordHistory.id')

    def __repr__(self):
        return f'<User {self.username}>'

    def history_credentials(self):
        """Stored credentials of the password history, oldest first"""
        return [entry.password_hash for entry in self.password_history]

    def has_valid_recovery_code(self, code, now=None):
        """Check a recovery code against the stored one and its expiry"""
        now = now or datetime.utcnow()
        if not self.recovery_code or not self.recovery_code_expires:
            return False
        if self.recovery_code_expires <= now:
            return False
        supplied = str(code or '').encode('utf-8')
        return hmac.compare_digest(self.recovery_code.encode('utf-8'), supplied)

    def clear_recovery_code(self):
        self.recovery_code = None
        self.recovery_code_expires = None

    def to_summary(self):
        """Public view of the account, without any credential material"""
        return {
            'username': self.username,
            'fullname': self.fullname,
            'email': self.email,
            'accountNumber': self.account_number,
            'accountType': self.account_type,
        }
