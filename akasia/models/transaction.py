from akasia.extensions import db
from datetime import datetime

TRANSACTION_TYPES = ('INCOME', 'EXPENSE', 'FUEL_PURCHASE')


class Transaction(db.Model):
    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.Enum(*TRANSACTION_TYPES, name='transaction_type'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    income = db.relationship('Income', backref='transaction', uselist=False, cascade='all, delete-orphan')
    expense = db.relationship('Expense', backref='transaction', uselist=False, cascade='all, delete-orphan')
    fuel_purchase = db.relationship('FuelPurchase', backref='transaction', uselist=False,
                                    cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('amount >= 0', name='transaction_amount_non_negative'),
    )

    def __repr__(self):
        return f'<Transaction {self.type} {self.amount}>'

    @property
    def signed_amount(self):
        return self.amount if self.type == 'INCOME' else -self.amount

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'amount': self.amount,
            'description': self.description,
            'date': self.date.isoformat(),
            'user': {'name': self.user.name, 'username': self.user.username} if self.user else None,
            'income': self.income.to_dict() if self.income else None,
            'expense': self.expense.to_dict() if self.expense else None,
            'fuel_purchase': self.fuel_purchase.to_dict() if self.fuel_purchase else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Income(db.Model):
    __tablename__ = 'incomes'

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey('transactions.id'), unique=True, nullable=False)
    source = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'source': self.source,
            'notes': self.notes,
        }


class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey('transactions.id'), unique=True, nullable=False)
    receipt_url = db.Column(db.String(500), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    items = db.relationship('ExpenseItem', backref='expense', cascade='all, delete-orphan', lazy=True)

    def to_dict(self):
        return {
            'receipt_url': self.receipt_url,
            'notes': self.notes,
            'items': [item.to_dict() for item in self.items],
        }


class ExpenseItem(db.Model):
    __tablename__ = 'expense_items'

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.Integer, db.ForeignKey('expenses.id'), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Integer, nullable=False)
    total = db.Column(db.Integer, nullable=False)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id'), nullable=True)

    car = db.relationship('Car')

    def to_dict(self):
        return {
            'description': self.description,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total': self.total,
            'car_id': self.car_id,
            'car': self.car.to_summary() if self.car else None,
        }
