from datetime import datetime

from sqlalchemy import func

from akasia.extensions import db
from akasia.models.transaction import Transaction
from akasia.utils.dates import month_range

# FUEL_PURCHASE is tracked as a separate ledger and never moves the cash balance
LEDGER_TYPES = ('INCOME', 'EXPENSE')


def _sum_amount(transaction_type, *criteria) -> int:
    total = db.session.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
        Transaction.type == transaction_type,
        Transaction.deleted_at.is_(None),
        *criteria
    ).scalar()
    return int(total or 0)


def calculate_balance_before(date: datetime, exclude_transaction_id=None) -> int:
    """
    Income minus expense over non-deleted transactions strictly before ``date``.
    """
    criteria = [Transaction.date < date]
    if exclude_transaction_id is not None:
        criteria.append(Transaction.id != exclude_transaction_id)

    return _sum_amount('INCOME', *criteria) - _sum_amount('EXPENSE', *criteria)


def get_balance() -> int:
    return _sum_amount('INCOME') - _sum_amount('EXPENSE')


def get_period_stats(start: datetime, end: datetime) -> dict:
    criteria = [Transaction.date >= start, Transaction.date <= end]
    total_income = _sum_amount('INCOME', *criteria)
    total_expense = _sum_amount('EXPENSE', *criteria)
    return {
        'total_income': total_income,
        'total_expense': total_expense,
        'net': total_income - total_expense,
    }


def get_monthly_stats(year: int, month: int) -> dict:
    return get_period_stats(*month_range(year, month))


def transaction_balances(transaction: Transaction) -> dict:
    """Balance before/after a single ledger transaction, computed on demand."""
    balance_before = calculate_balance_before(transaction.date, exclude_transaction_id=transaction.id)
    balance_after = balance_before
    if transaction.type in LEDGER_TYPES and transaction.deleted_at is None:
        balance_after += transaction.signed_amount
    return {
        'balance_before': balance_before,
        'balance_after': balance_after,
    }


def get_ledger(start: datetime, end: datetime) -> dict:
    """
    Ledger rows for a period with a running balance, seeded by the
    balance of everything before ``start``.
    """
    opening_balance = calculate_balance_before(start)

    transactions = Transaction.query.filter(
        Transaction.date >= start,
        Transaction.date <= end,
        Transaction.type.in_(LEDGER_TYPES),
        Transaction.deleted_at.is_(None)
    ).order_by(Transaction.date.asc(), Transaction.id.asc()).all()

    rows = []
    balance = opening_balance
    total_income = 0
    total_expense = 0
    for transaction in transactions:
        balance += transaction.signed_amount
        if transaction.type == 'INCOME':
            total_income += transaction.amount
        else:
            total_expense += transaction.amount
        rows.append({'transaction': transaction, 'balance': balance})

    return {
        'start_date': start,
        'end_date': end,
        'rows': rows,
        'stats': {
            'total_income': total_income,
            'total_expense': total_expense,
            'opening_balance': opening_balance,
            'closing_balance': opening_balance + total_income - total_expense,
        },
    }
