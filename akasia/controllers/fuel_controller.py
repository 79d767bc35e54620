from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.fuel_purchase import FuelPurchase
from akasia.models.transaction import Income, Transaction
from akasia.schemas.fuel import FuelIncomeSchema, FuelPurchaseSchema
from akasia.services.reporting_service import get_fuel_monthly_report
from akasia.utils.auth import auth_required, current_user
from akasia.utils.dates import current_hijri, current_month_range, hijri_month_range, month_range
from akasia.utils.validation import validate_payload

fuel_bp = Blueprint('fuel', __name__, url_prefix='/fuel')


@fuel_bp.route('/purchases', methods=['POST'])
@auth_required
def purchase_fuel():
    payload, error = validate_payload(FuelPurchaseSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    car = db.session.get(Car, payload.car_id)
    if car is None or car.deleted_at is not None:
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    total_amount = round(payload.liter_amount * payload.price_per_liter)

    transaction = Transaction(
        type='FUEL_PURCHASE',
        amount=total_amount,
        description=f"Pembelian BBM - {car.name} ({car.license_plate})",
        date=payload.date,
        user=current_user(),
        fuel_purchase=FuelPurchase(
            car=car,
            liter_amount=payload.liter_amount,
            price_per_liter=payload.price_per_liter,
            total_amount=total_amount,
            notes=payload.notes,
        ),
    )

    try:
        db.session.add(transaction)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to save fuel purchase for car %s", car.id)
        return jsonify({'error': 'Gagal menyimpan pembelian BBM'}), 500

    return jsonify(transaction.to_dict()), 201


@fuel_bp.route('/income', methods=['POST'])
@auth_required
def receive_fuel_income():
    payload, error = validate_payload(FuelIncomeSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    transaction = Transaction(
        type='INCOME',
        amount=payload.amount,
        description=f"Dana BBM - {payload.source}",
        date=payload.date,
        user=current_user(),
        income=Income(source=payload.source, notes=payload.notes),
    )

    try:
        db.session.add(transaction)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to save fuel income")
        return jsonify({'error': 'Gagal menyimpan pemasukan'}), 500

    return jsonify(transaction.to_dict()), 201


@fuel_bp.route('/transactions', methods=['GET'])
@auth_required
def list_fuel_transactions():
    hijri_year = request.args.get('hijri_year', type=int)
    hijri_month = request.args.get('hijri_month', type=int)
    year = request.args.get('year', type=int)
    month = request.args.get('month', type=int)
    if hijri_month is not None and not 1 <= hijri_month <= 12:
        return jsonify({'error': 'Bulan hijriah harus antara 1 dan 12'}), 400
    if month is not None and not 1 <= month <= 12:
        return jsonify({'error': 'Bulan harus antara 1 dan 12'}), 400

    if hijri_year and hijri_month:
        start, end = hijri_month_range(hijri_year, hijri_month)
    elif year and month:
        start, end = month_range(year, month)
    else:
        start, end = current_month_range()

    transactions = Transaction.query.filter(
        Transaction.type.in_(('INCOME', 'FUEL_PURCHASE')),
        Transaction.date >= start,
        Transaction.date <= end,
        Transaction.deleted_at.is_(None)
    ).order_by(Transaction.date.desc()).all()

    return jsonify([transaction.to_dict() for transaction in transactions])


@fuel_bp.route('/report', methods=['GET'])
@auth_required
def fuel_monthly_report():
    today = current_hijri()
    hijri_year = request.args.get('hijri_year', today['hijri_year'], type=int)
    hijri_month = request.args.get('hijri_month', today['hijri_month'], type=int)
    if not 1 <= hijri_month <= 12:
        return jsonify({'error': 'Bulan hijriah harus antara 1 dan 12'}), 400

    return jsonify(get_fuel_monthly_report(hijri_year, hijri_month))
