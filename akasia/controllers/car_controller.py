from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car
from akasia.schemas.car import CarSchema
from akasia.services.car_service import CarError, create_car, default_barcode, find_car_by_plate
from akasia.utils.auth import auth_required
from akasia.utils.validation import validate_payload

car_bp = Blueprint('cars', __name__, url_prefix='/cars')


def _get_car_or_none(car_id):
    car = db.session.get(Car, car_id)
    if car is None or car.deleted_at is not None:
        return None
    return car


@car_bp.route('', methods=['GET'])
@auth_required
def list_cars():
    cars = Car.query.filter(Car.deleted_at.is_(None)).order_by(Car.name.asc()).all()

    result = []
    for car in cars:
        data = car.to_dict()
        latest = car.usage_records[0] if car.usage_records else None
        data['latest_usage'] = latest.to_dict() if latest else None
        data['counts'] = {
            'usage_records': len(car.usage_records),
            'fuel_purchases': len(car.fuel_purchases),
            'taxes': len(car.taxes),
        }
        result.append(data)

    return jsonify(result)


@car_bp.route('/<int:car_id>', methods=['GET'])
@auth_required
def get_car(car_id):
    car = _get_car_or_none(car_id)
    if car is None:
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    data = car.to_dict()
    data['usage_records'] = [usage.to_dict() for usage in car.usage_records[:10]]
    data['fuel_purchases'] = [purchase.to_dict() for purchase in car.fuel_purchases[:10]]
    data['taxes'] = [tax.to_dict() for tax in car.taxes[:5]]
    return jsonify(data)


@car_bp.route('', methods=['POST'])
@auth_required
def add_car():
    payload, error = validate_payload(CarSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        car = create_car(payload.name, payload.license_plate, payload.barcode_string)
        db.session.commit()
    except CarError as exc:
        return jsonify({'error': exc.message}), exc.status_code
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Plat nomor sudah terdaftar'}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create car %s", payload.license_plate)
        return jsonify({'error': 'Gagal menambah mobil'}), 500

    return jsonify(car.to_dict()), 201


@car_bp.route('/<int:car_id>', methods=['PUT'])
@auth_required
def update_car(car_id):
    car = _get_car_or_none(car_id)
    if car is None:
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    payload, error = validate_payload(CarSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    if find_car_by_plate(payload.license_plate, exclude_id=car.id) is not None:
        return jsonify({'error': 'Plat nomor sudah terdaftar'}), 409

    car.name = payload.name
    car.license_plate = payload.license_plate
    car.barcode_string = payload.barcode_string or default_barcode(payload.license_plate)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Plat nomor sudah terdaftar'}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update car %s", car_id)
        return jsonify({'error': 'Gagal mengupdate mobil'}), 500

    return jsonify(car.to_dict())


@car_bp.route('/<int:car_id>', methods=['DELETE'])
@auth_required
def delete_car(car_id):
    car = _get_car_or_none(car_id)
    if car is None:
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    car.deleted_at = datetime.utcnow()
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete car %s", car_id)
        return jsonify({'error': 'Gagal menghapus mobil'}), 500

    return jsonify({'message': 'Mobil berhasil dihapus'})
