from akasia.extensions import db
from datetime import datetime

TAX_TYPES = ('ANNUAL', 'FIVE_YEAR')


class Tax(db.Model):
    __tablename__ = 'taxes'

    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id'), nullable=False)
    type = db.Column(db.Enum(*TAX_TYPES, name='tax_type'), nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    is_paid = db.Column(db.Boolean, nullable=False, default=False)
    paid_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    payments = db.relationship('TaxPayment', backref='tax', lazy=True, cascade='all, delete-orphan',
                               order_by='TaxPayment.paid_at.desc()')

    def to_dict(self):
        return {
            'id': self.id,
            'car': self.car.to_summary() if self.car else None,
            'type': self.type,
            'due_date': self.due_date.isoformat(),
            'notes': self.notes,
            'is_paid': self.is_paid,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
            'payments': [payment.to_dict() for payment in self.payments],
        }


class TaxPayment(db.Model):
    __tablename__ = 'tax_payments'

    id = db.Column(db.Integer, primary_key=True)
    tax_id = db.Column(db.Integer, db.ForeignKey('taxes.id'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    paid_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': self.amount,
            'notes': self.notes,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
        }
