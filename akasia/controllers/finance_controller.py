from datetime import date, datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.transaction import TRANSACTION_TYPES, Expense, ExpenseItem, Income, Transaction
from akasia.schemas.finance import ExpenseSchema, IncomeSchema
from akasia.services.balance_service import (
    LEDGER_TYPES, get_balance, get_ledger, get_monthly_stats, transaction_balances
)
from akasia.services.image_service import ImageUploadError, upload_compressed_image
from akasia.utils.auth import auth_required, current_user
from akasia.utils.dates import current_hijri, hijri_month_range, month_range
from akasia.utils.validation import request_payload, validate_payload

finance_bp = Blueprint('finance', __name__, url_prefix='/finance')


def _get_transaction_or_none(transaction_id, transaction_type=None):
    transaction = db.session.get(Transaction, transaction_id)
    if transaction is None or transaction.deleted_at is not None:
        return None
    if transaction_type and transaction.type != transaction_type:
        return None
    return transaction


def _hijri_args():
    """``hijri_year``/``hijri_month`` query args, defaulting to the current Hijri month."""
    today = current_hijri()
    hijri_year = request.args.get('hijri_year', today['hijri_year'], type=int)
    hijri_month = request.args.get('hijri_month', today['hijri_month'], type=int)
    if not 1 <= hijri_month <= 12:
        raise ValueError('Bulan hijriah harus antara 1 dan 12')
    return hijri_year, hijri_month


@finance_bp.route('/transactions', methods=['GET'])
@auth_required
def list_transactions():
    year = request.args.get('year', type=int)
    month = request.args.get('month', type=int)
    transaction_type = request.args.get('type')
    limit = request.args.get('limit', 50, type=int)

    if transaction_type and transaction_type not in TRANSACTION_TYPES:
        return jsonify({'error': 'Tipe transaksi tidak valid'}), 400
    if month is not None and not 1 <= month <= 12:
        return jsonify({'error': 'Bulan harus antara 1 dan 12'}), 400

    query = Transaction.query.filter(Transaction.deleted_at.is_(None))
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    else:
        query = query.filter(Transaction.type.in_(LEDGER_TYPES))

    if year and month:
        start, end = month_range(year, month)
        query = query.filter(Transaction.date >= start, Transaction.date <= end)

    transactions = query.order_by(Transaction.date.desc()).limit(limit).all()
    return jsonify([transaction.to_dict() for transaction in transactions])


@finance_bp.route('/transactions/<int:transaction_id>', methods=['GET'])
@auth_required
def get_transaction(transaction_id):
    transaction = _get_transaction_or_none(transaction_id)
    if transaction is None:
        return jsonify({'error': 'Transaksi tidak ditemukan'}), 404

    data = transaction.to_dict()
    data.update(transaction_balances(transaction))
    return jsonify(data)


@finance_bp.route('/balance', methods=['GET'])
@auth_required
def balance():
    return jsonify({'balance': get_balance()})


@finance_bp.route('/stats/monthly', methods=['GET'])
@auth_required
def monthly_stats():
    today = date.today()
    year = request.args.get('year', today.year, type=int)
    month = request.args.get('month', today.month, type=int)
    if not 1 <= month <= 12:
        return jsonify({'error': 'Bulan harus antara 1 dan 12'}), 400

    stats = get_monthly_stats(year, month)
    stats.update({'year': year, 'month': month})
    return jsonify(stats)


@finance_bp.route('/ledger/hijri', methods=['GET'])
@auth_required
def hijri_ledger():
    try:
        hijri_year, hijri_month = _hijri_args()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    start, end = hijri_month_range(hijri_year, hijri_month)
    ledger = get_ledger(start, end)

    return jsonify({
        'hijri_year': hijri_year,
        'hijri_month': hijri_month,
        'start_date': start.isoformat(),
        'end_date': end.isoformat(),
        'transactions': [
            dict(row['transaction'].to_dict(), balance=row['balance'])
            for row in ledger['rows']
        ],
        'stats': dict(ledger['stats'], previous_month_balance=ledger['stats']['opening_balance']),
    })


@finance_bp.route('/hijri/today', methods=['GET'])
@auth_required
def hijri_today():
    return jsonify(current_hijri())


@finance_bp.route('/income', methods=['POST'])
@auth_required
def create_income():
    payload, error = validate_payload(IncomeSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    transaction = Transaction(
        type='INCOME',
        amount=payload.amount,
        description=payload.source,
        date=payload.date,
        user=current_user(),
        income=Income(source=payload.source, notes=payload.notes),
    )

    try:
        db.session.add(transaction)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create income")
        return jsonify({'error': 'Gagal menyimpan pemasukan'}), 500

    return jsonify(transaction.to_dict()), 201


@finance_bp.route('/income/<int:transaction_id>', methods=['PUT'])
@auth_required
def update_income(transaction_id):
    transaction = _get_transaction_or_none(transaction_id, 'INCOME')
    if transaction is None:
        return jsonify({'error': 'Transaksi tidak ditemukan'}), 404

    payload, error = validate_payload(IncomeSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    transaction.amount = payload.amount
    transaction.description = payload.source
    transaction.date = payload.date
    if transaction.income is None:
        transaction.income = Income(source=payload.source)
    transaction.income.source = payload.source
    transaction.income.notes = payload.notes

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update income %s", transaction_id)
        return jsonify({'error': 'Gagal mengupdate pemasukan'}), 500

    return jsonify(transaction.to_dict())


def _expense_items(payload):
    return [
        ExpenseItem(
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
            car_id=item.car_id,
        )
        for item in payload.items
    ]


def _upload_receipt():
    receipt = request.files.get('receipt')
    if receipt is None or not receipt.filename:
        return None
    return upload_compressed_image(receipt, 'receipts')['file_url']


@finance_bp.route('/expense', methods=['POST'])
@auth_required
def create_expense():
    """
    Create an expense with line items. Accepts JSON, or multipart with the
    JSON in ``payload`` and an optional ``receipt`` image.
    """
    payload, error = validate_payload(ExpenseSchema, request_payload(request))
    if error:
        return jsonify({'error': error}), 400

    try:
        receipt_url = _upload_receipt()
    except ImageUploadError as e:
        return jsonify({'error': str(e)}), e.status_code

    transaction = Transaction(
        type='EXPENSE',
        amount=payload.total_amount,
        description=payload.description,
        date=payload.date,
        user=current_user(),
        expense=Expense(receipt_url=receipt_url, notes=payload.notes, items=_expense_items(payload)),
    )

    try:
        db.session.add(transaction)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create expense")
        return jsonify({'error': 'Gagal menyimpan pengeluaran'}), 500

    return jsonify(transaction.to_dict()), 201


@finance_bp.route('/expense/<int:transaction_id>', methods=['PUT'])
@auth_required
def update_expense(transaction_id):
    transaction = _get_transaction_or_none(transaction_id, 'EXPENSE')
    if transaction is None:
        return jsonify({'error': 'Transaksi tidak ditemukan'}), 404

    payload, error = validate_payload(ExpenseSchema, request_payload(request))
    if error:
        return jsonify({'error': error}), 400

    try:
        receipt_url = _upload_receipt()
    except ImageUploadError as e:
        return jsonify({'error': str(e)}), e.status_code

    transaction.amount = payload.total_amount
    transaction.description = payload.description
    transaction.date = payload.date
    if transaction.expense is None:
        transaction.expense = Expense()
    transaction.expense.notes = payload.notes
    transaction.expense.items = _expense_items(payload)
    if receipt_url:
        transaction.expense.receipt_url = receipt_url

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update expense %s", transaction_id)
        return jsonify({'error': 'Gagal mengupdate pengeluaran'}), 500

    return jsonify(transaction.to_dict())


@finance_bp.route('/transactions/<int:transaction_id>', methods=['DELETE'])
@auth_required
def delete_transaction(transaction_id):
    transaction = _get_transaction_or_none(transaction_id)
    if transaction is None:
        return jsonify({'error': 'Transaksi tidak ditemukan'}), 404

    transaction.deleted_at = datetime.utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete transaction %s", transaction_id)
        return jsonify({'error': 'Gagal menghapus transaksi'}), 500

    return jsonify({'message': 'Transaksi berhasil dihapus'})
