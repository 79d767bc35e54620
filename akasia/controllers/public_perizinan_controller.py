from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.controllers.perizinan_controller import build_perizinan, car_exists
from akasia.extensions import db
from akasia.models.car import Car
from akasia.schemas.approval import PerizinanSchema
from akasia.services.approval_service import ApprovalError, decide
from akasia.services.notification_service import notify_new_perizinan
from akasia.services.token_service import TokenError, consume_token, validate_token
from akasia.utils.validation import validate_payload

# Unauthenticated: every mutation here is gated by a single-use token
public_perizinan_bp = Blueprint('public_perizinan', __name__, url_prefix='/public/perizinan')


@public_perizinan_bp.errorhandler(TokenError)
def handle_token_error(error):
    return jsonify({'valid': False, 'error': str(error)}), 400


@public_perizinan_bp.route('/tokens/<token>', methods=['GET'])
def check_token(token):
    token_data = validate_token(token)
    return jsonify({
        'valid': True,
        'type': token_data.type,
        'expires_at': token_data.expires_at.isoformat(),
        'perizinan': token_data.perizinan.to_dict() if token_data.perizinan else None,
    })


@public_perizinan_bp.route('/cars', methods=['GET'])
def public_cars():
    cars = Car.query.filter(Car.deleted_at.is_(None)).order_by(Car.name.asc()).all()
    return jsonify([car.to_summary() for car in cars])


@public_perizinan_bp.route('/form/<token>', methods=['POST'])
def submit_form(token):
    token_data = validate_token(token, expected_type='FORM')

    payload, error = validate_payload(PerizinanSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    if not car_exists(payload.car_id):
        return jsonify({'error': 'Pilih kendaraan'}), 400

    perizinan = build_perizinan(payload)

    try:
        db.session.add(perizinan)
        consume_token(token_data, perizinan)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to submit public perizinan")
        return jsonify({'error': 'Gagal mengirim pengajuan'}), 500

    notification = notify_new_perizinan(perizinan)
    return jsonify({
        'success': True,
        'perizinan': perizinan.to_dict(),
        'notification_sent': notification['success'],
    }), 201


def _decide_with_token(token, status):
    token_data = validate_token(token, expected_type='APPROVE')

    perizinan = token_data.perizinan
    if perizinan is None:
        return jsonify({'error': 'Data perizinan tidak ditemukan'}), 404

    try:
        decide(perizinan, status)
    except ApprovalError as e:
        return jsonify({'error': str(e)}), 400

    consume_token(token_data)

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s perizinan %s with token", status.lower(), perizinan.id)
        return jsonify({'error': 'Gagal memproses perizinan'}), 500

    return jsonify({'success': True, 'perizinan': perizinan.to_dict()})


@public_perizinan_bp.route('/approve/<token>', methods=['POST'])
def approve_with_token(token):
    return _decide_with_token(token, 'APPROVED')


@public_perizinan_bp.route('/reject/<token>', methods=['POST'])
def reject_with_token(token):
    return _decide_with_token(token, 'REJECTED')
