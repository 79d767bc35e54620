from datetime import date, datetime, timedelta

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.tax import Tax, TaxPayment
from akasia.schemas.tax import CreateTaxSchema, PayTaxSchema, UpdateTaxSchema
from akasia.utils.auth import auth_required
from akasia.utils.validation import validate_payload

tax_bp = Blueprint('taxes', __name__, url_prefix='/taxes')


def upcoming_taxes(days=30):
    """Unpaid taxes due within ``days`` from today, overdue ones included."""
    limit = date.today() + timedelta(days=days)
    return (
        Tax.query
        .filter(Tax.is_paid.is_(False), Tax.due_date <= limit)
        .order_by(Tax.due_date.asc())
        .all()
    )


@tax_bp.route('', methods=['GET'])
@auth_required
def list_taxes():
    is_paid = request.args.get('is_paid')
    car_id = request.args.get('car_id', type=int)

    query = Tax.query
    if is_paid is not None:
        query = query.filter(Tax.is_paid.is_(is_paid.lower() == 'true'))
    if car_id:
        query = query.filter(Tax.car_id == car_id)

    taxes = query.order_by(Tax.due_date.asc()).all()
    return jsonify([tax.to_dict() for tax in taxes])


@tax_bp.route('/upcoming', methods=['GET'])
@auth_required
def list_upcoming():
    days = request.args.get('days', 30, type=int)
    return jsonify([tax.to_dict() for tax in upcoming_taxes(days)])


@tax_bp.route('/<int:tax_id>', methods=['GET'])
@auth_required
def get_tax(tax_id):
    tax = db.session.get(Tax, tax_id)
    if tax is None:
        return jsonify({'error': 'Pajak tidak ditemukan'}), 404
    return jsonify(tax.to_dict())


@tax_bp.route('', methods=['POST'])
@auth_required
def create_tax():
    payload, error = validate_payload(CreateTaxSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    car = db.session.get(Car, payload.car_id)
    if car is None or car.deleted_at is not None:
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    tax = Tax(car=car, type=payload.type, due_date=payload.due_date, notes=payload.notes)

    try:
        db.session.add(tax)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create tax for car %s", car.id)
        return jsonify({'error': 'Gagal menambah pajak'}), 500

    return jsonify(tax.to_dict()), 201


@tax_bp.route('/<int:tax_id>', methods=['PUT'])
@auth_required
def update_tax(tax_id):
    tax = db.session.get(Tax, tax_id)
    if tax is None:
        return jsonify({'error': 'Pajak tidak ditemukan'}), 404

    payload, error = validate_payload(UpdateTaxSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    tax.type = payload.type
    tax.due_date = payload.due_date
    tax.notes = payload.notes
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update tax %s", tax_id)
        return jsonify({'error': 'Gagal memperbarui pajak'}), 500

    return jsonify(tax.to_dict())


@tax_bp.route('/<int:tax_id>/pay', methods=['POST'])
@auth_required
def pay_tax(tax_id):
    tax = db.session.get(Tax, tax_id)
    if tax is None:
        return jsonify({'error': 'Pajak tidak ditemukan'}), 404

    payload, error = validate_payload(PayTaxSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    paid_at = datetime.utcnow()
    tax.payments.append(TaxPayment(amount=payload.amount, notes=payload.notes, paid_at=paid_at))
    tax.is_paid = True
    tax.paid_at = paid_at

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to pay tax %s", tax_id)
        return jsonify({'error': 'Gagal membayar pajak'}), 500

    return jsonify(tax.to_dict())


@tax_bp.route('/<int:tax_id>', methods=['DELETE'])
@auth_required
def delete_tax(tax_id):
    tax = db.session.get(Tax, tax_id)
    if tax is None:
        return jsonify({'error': 'Pajak tidak ditemukan'}), 404

    try:
        db.session.delete(tax)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete tax %s", tax_id)
        return jsonify({'error': 'Gagal menghapus pajak'}), 500

    return jsonify({'message': 'Pajak berhasil dihapus'})
