from akasia.extensions import db
from datetime import datetime

SPENDING_TASK_STATUSES = ('DRAFT', 'FUNDED', 'SPENDING', 'NEEDS_REFUND', 'NEEDS_REIMBURSE', 'SETTLED')
SETTLEMENT_TYPES = ('REFUND', 'REIMBURSE')
SETTLEMENT_STATUSES = ('PENDING', 'DONE')


class SpendingTask(db.Model):
    __tablename__ = 'spending_tasks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.Enum(*SPENDING_TASK_STATUSES, name='spending_task_status'),
                       nullable=False, default='DRAFT')
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    created_by = db.relationship('User')
    funding = db.relationship('TaskFunding', backref='task', uselist=False, cascade='all, delete-orphan')
    receipts = db.relationship('Receipt', backref='task', lazy=True, cascade='all, delete-orphan',
                               order_by='Receipt.created_at.desc()')
    settlements = db.relationship('TaskSettlement', backref='task', lazy=True, cascade='all, delete-orphan')

    def settlement_of(self, settlement_type):
        return next((s for s in self.settlements if s.type == settlement_type), None)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'created_by': {'id': self.created_by.id, 'name': self.created_by.name} if self.created_by else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'funding': self.funding.to_dict() if self.funding else None,
        }


class TaskFunding(db.Model):
    __tablename__ = 'task_fundings'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('spending_tasks.id'), unique=True, nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    received_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    source = db.Column(db.String(255), nullable=False, default='Yayasan')
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'amount': self.amount,
            'received_at': self.received_at.isoformat(),
            'source': self.source,
            'notes': self.notes,
        }


class Receipt(db.Model):
    __tablename__ = 'receipts'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('spending_tasks.id'), nullable=False)
    vendor = db.Column(db.String(255), nullable=True)
    receipt_no = db.Column(db.String(100), nullable=True)
    receipt_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    total_amount = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship('ReceiptItem', backref='receipt', lazy=True, cascade='all, delete-orphan')
    attachments = db.relationship('ReceiptAttachment', backref='receipt', lazy=True, cascade='all, delete-orphan')
    cashbacks = db.relationship('Cashback', backref='receipt', lazy=True, cascade='all, delete-orphan',
                                order_by='Cashback.occurred_at.desc()')

    def to_dict(self):
        return {
            'id': self.id,
            'task_id': self.task_id,
            'vendor': self.vendor,
            'receipt_no': self.receipt_no,
            'receipt_date': self.receipt_date.isoformat() if self.receipt_date else None,
            'notes': self.notes,
            'total_amount': self.total_amount,
            'items': [item.to_dict() for item in self.items],
            'attachments': [attachment.to_dict() for attachment in self.attachments],
            'cashbacks': [cashback.to_dict() for cashback in self.cashbacks],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class ReceiptItem(db.Model):
    __tablename__ = 'receipt_items'

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey('receipts.id'), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total': self.total,
        }


class ReceiptAttachment(db.Model):
    __tablename__ = 'receipt_attachments'

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey('receipts.id'), nullable=False)
    file_url = db.Column(db.String(500), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    mime_type = db.Column(db.String(100), nullable=False)
    size_bytes = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            'file_url': self.file_url,
            'file_name': self.file_name,
            'mime_type': self.mime_type,
            'size_bytes': self.size_bytes,
        }


class TaskSettlement(db.Model):
    __tablename__ = 'task_settlements'

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey('spending_tasks.id'), nullable=False)
    type = db.Column(db.Enum(*SETTLEMENT_TYPES, name='settlement_type'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.Enum(*SETTLEMENT_STATUSES, name='settlement_status'), nullable=False, default='PENDING')
    done_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('task_id', 'type', name='uq_task_settlement_type'),
    )

    def to_dict(self):
        return {
            'type': self.type,
            'amount': self.amount,
            'status': self.status,
            'done_at': self.done_at.isoformat() if self.done_at else None,
            'notes': self.notes,
        }


class Cashback(db.Model):
    __tablename__ = 'cashbacks'

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey('receipts.id'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    vendor = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    occurred_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': self.amount,
            'vendor': self.vendor,
            'notes': self.notes,
            'occurred_at': self.occurred_at.isoformat(),
        }
