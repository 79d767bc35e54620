from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.pengajuan import APPROVAL_STATUSES
from akasia.models.perizinan import Perizinan, PerizinanToken
from akasia.schemas.approval import ApprovalTokenSchema, FormTokenSchema, PerizinanSchema
from akasia.services.approval_service import ApprovalError, decide
from akasia.services.notification_service import approval_url, notify_new_perizinan
from akasia.services.token_service import (
    TokenError, active_tokens, issue_approval_token, issue_form_token
)
from akasia.utils.auth import auth_required
from akasia.utils.validation import validate_payload

perizinan_bp = Blueprint('perizinan', __name__, url_prefix='/perizinan')


def build_perizinan(payload) -> Perizinan:
    return Perizinan(
        car_id=payload.car_id,
        name=payload.name,
        purpose=payload.purpose,
        destination=payload.destination,
        description=payload.description,
        number_of_passengers=payload.number_of_passengers,
        date=payload.date,
        estimation=payload.estimation,
        status='PENDING',
    )


def car_exists(car_id) -> bool:
    car = db.session.get(Car, car_id)
    return car is not None and car.deleted_at is None


@perizinan_bp.route('', methods=['GET'])
@auth_required
def list_perizinan():
    status = request.args.get('status')
    car_id = request.args.get('car_id', type=int)
    if status and status not in APPROVAL_STATUSES:
        return jsonify({'error': 'Status tidak valid'}), 400

    query = Perizinan.query
    if status:
        query = query.filter(Perizinan.status == status)
    if car_id:
        query = query.filter(Perizinan.car_id == car_id)

    records = query.order_by(Perizinan.date.desc()).all()
    return jsonify([record.to_dict() for record in records])


@perizinan_bp.route('/pending', methods=['GET'])
@auth_required
def list_pending():
    records = (
        Perizinan.query
        .filter(Perizinan.status == 'PENDING')
        .order_by(Perizinan.date.asc())
        .all()
    )
    return jsonify([record.to_dict() for record in records])


@perizinan_bp.route('', methods=['POST'])
@auth_required
def create_perizinan():
    payload, error = validate_payload(PerizinanSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    if not car_exists(payload.car_id):
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    perizinan = build_perizinan(payload)

    try:
        db.session.add(perizinan)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create perizinan")
        return jsonify({'error': 'Gagal menambah perizinan'}), 500

    notification = notify_new_perizinan(perizinan)
    return jsonify({'perizinan': perizinan.to_dict(), 'notification': notification}), 201


def _decide(perizinan_id, status):
    perizinan = db.session.get(Perizinan, perizinan_id)
    if perizinan is None:
        return jsonify({'error': 'Perizinan tidak ditemukan'}), 404

    try:
        decide(perizinan, status)
    except ApprovalError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to decide perizinan %s", perizinan_id)
        return jsonify({'error': 'Gagal memproses perizinan'}), 500

    return jsonify(perizinan.to_dict())


@perizinan_bp.route('/<int:perizinan_id>/approve', methods=['POST'])
@auth_required
def approve_perizinan(perizinan_id):
    return _decide(perizinan_id, 'APPROVED')


@perizinan_bp.route('/<int:perizinan_id>/reject', methods=['POST'])
@auth_required
def reject_perizinan(perizinan_id):
    return _decide(perizinan_id, 'REJECTED')


# ----------------------------------------------------------------------------
# Token management
# ----------------------------------------------------------------------------
@perizinan_bp.route('/tokens', methods=['GET'])
@auth_required
def list_tokens():
    return jsonify([token.to_dict() for token in active_tokens()])


@perizinan_bp.route('/tokens/form', methods=['POST'])
@auth_required
def create_form_token():
    payload, error = validate_payload(FormTokenSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    token = issue_form_token(payload.expiration_days)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to issue form token")
        return jsonify({'error': 'Gagal membuat token'}), 500

    base_url = current_app.config['APP_BASE_URL'].rstrip('/')
    data = token.to_dict()
    data['url'] = f"{base_url}/perizinan/form/{token.token}"
    return jsonify(data), 201


@perizinan_bp.route('/<int:perizinan_id>/tokens/approval', methods=['POST'])
@auth_required
def create_approval_token(perizinan_id):
    perizinan = db.session.get(Perizinan, perizinan_id)
    if perizinan is None:
        return jsonify({'error': 'Perizinan tidak ditemukan'}), 404

    payload, error = validate_payload(ApprovalTokenSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    try:
        token = issue_approval_token(perizinan, payload.expiration_hours)
    except TokenError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to issue approval token for perizinan %s", perizinan_id)
        return jsonify({'error': 'Gagal membuat token'}), 500

    data = token.to_dict()
    data['url'] = approval_url(token)
    return jsonify(data), 201


@perizinan_bp.route('/tokens/<int:token_id>', methods=['DELETE'])
@auth_required
def delete_token(token_id):
    token = db.session.get(PerizinanToken, token_id)
    if token is None:
        return jsonify({'error': 'Token tidak ditemukan'}), 404

    try:
        db.session.delete(token)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete token %s", token_id)
        return jsonify({'error': 'Gagal menghapus token'}), 500

    return jsonify({'message': 'Token berhasil dihapus'})
