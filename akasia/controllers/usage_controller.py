from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import UsageRecord
from akasia.schemas.car import EndUsageSchema, StartUsageSchema
from akasia.services.car_service import CarError, end_usage, get_active_usage_for_user, start_usage
from akasia.utils.auth import auth_required, current_user
from akasia.utils.validation import validate_payload

usage_bp = Blueprint('usage', __name__, url_prefix='/usage')


@usage_bp.route('', methods=['GET'])
@auth_required
def list_usage():
    car_id = request.args.get('car_id', type=int)
    user_id = request.args.get('user_id', type=int)
    active_only = request.args.get('active', 'false').lower() == 'true'
    limit = request.args.get('limit', 50, type=int)

    query = UsageRecord.query
    if car_id:
        query = query.filter(UsageRecord.car_id == car_id)
    if user_id:
        query = query.filter(UsageRecord.user_id == user_id)
    if active_only:
        query = query.filter(UsageRecord.end_time.is_(None))

    records = query.order_by(UsageRecord.start_time.desc()).limit(limit).all()
    return jsonify([record.to_dict() for record in records])


@usage_bp.route('/active', methods=['GET'])
@auth_required
def list_active_usage():
    records = (
        UsageRecord.query
        .filter(UsageRecord.end_time.is_(None))
        .order_by(UsageRecord.start_time.desc())
        .all()
    )
    return jsonify([record.to_dict() for record in records])


@usage_bp.route('/me', methods=['GET'])
@auth_required
def driving_status():
    active = get_active_usage_for_user(current_user().id)
    return jsonify({
        'is_driving': active is not None,
        'usage': active.to_dict() if active else None,
    })


@usage_bp.route('/start', methods=['POST'])
@auth_required
def start():
    payload, error = validate_payload(StartUsageSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        usage = start_usage(
            current_user(),
            payload.car_id,
            payload.purpose,
            payload.destination,
            payload.start_time
        )
        db.session.commit()
    except CarError as exc:
        return jsonify({'error': exc.message}), exc.status_code
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to start usage of car %s", payload.car_id)
        return jsonify({'error': 'Gagal memulai penggunaan kendaraan'}), 500

    return jsonify(usage.to_dict()), 201


@usage_bp.route('/<int:usage_id>/end', methods=['POST'])
@auth_required
def end(usage_id):
    payload, error = validate_payload(EndUsageSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        usage = end_usage(usage_id, payload.end_time)
        db.session.commit()
    except CarError as exc:
        return jsonify({'error': exc.message}), exc.status_code
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to end usage %s", usage_id)
        return jsonify({'error': 'Gagal mengakhiri penggunaan kendaraan'}), 500

    return jsonify(usage.to_dict())
