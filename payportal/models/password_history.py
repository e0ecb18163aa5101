# payportal/models/password_history.py
"""Password History model
Keeps the most recent credentials of each user to enforce non-reuse
"""
from datetime import datetime
from payportal.extensions import db


class PasswordHistory(db.Model):
    """
    One stored credential of a user's bounded password history

    Entries are used only to reject reuse, never to authenticate.
    """
    __tablename__ = 'password_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Stored credential (never plaintext)
    password_hash = db.Column(db.String(60), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f'<PasswordHistory user_id={self.user_id} created_at={self.created_at}>'
