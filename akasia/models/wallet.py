from akasia.extensions import db
from datetime import datetime

WALLET_ENTRY_TYPES = ('CREDIT', 'DEBIT')
WALLET_ENTRY_SOURCES = ('CASHBACK', 'MANUAL')
GLOBAL_WALLET_NAME = 'Global Wallet'


class Wallet(db.Model):
    __tablename__ = 'wallets'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    entries = db.relationship('WalletEntry', backref='wallet', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class WalletEntry(db.Model):
    __tablename__ = 'wallet_entries'

    id = db.Column(db.Integer, primary_key=True)
    wallet_id = db.Column(db.Integer, db.ForeignKey('wallets.id'), nullable=False)
    type = db.Column(db.Enum(*WALLET_ENTRY_TYPES, name='wallet_entry_type'), nullable=False)
    source = db.Column(db.Enum(*WALLET_ENTRY_SOURCES, name='wallet_entry_source'), nullable=False, default='MANUAL')
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    attachment_url = db.Column(db.String(500), nullable=True)
    task_id = db.Column(db.Integer, db.ForeignKey('spending_tasks.id'), nullable=True)
    cashback_id = db.Column(db.Integer, db.ForeignKey('cashbacks.id', ondelete='SET NULL'), nullable=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    created_by = db.relationship('User')

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='wallet_entry_amount_positive'),
    )

    @property
    def signed_amount(self):
        return self.amount if self.type == 'CREDIT' else -self.amount

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'source': self.source,
            'amount': self.amount,
            'description': self.description,
            'occurred_at': self.occurred_at.isoformat(),
            'attachment_url': self.attachment_url,
            'task_id': self.task_id,
            'cashback_id': self.cashback_id,
            'created_by': self.created_by.name if self.created_by else None,
        }
