from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.pengajuan import APPROVAL_STATUSES, Pengajuan, PengajuanItem
from akasia.schemas.approval import PengajuanSchema, RejectPengajuanSchema
from akasia.services.approval_service import ApprovalError, decide
from akasia.utils.auth import auth_required
from akasia.utils.validation import validate_payload

pengajuan_bp = Blueprint('pengajuan', __name__, url_prefix='/pengajuan')


@pengajuan_bp.route('', methods=['GET'])
@auth_required
def list_pengajuan():
    status = request.args.get('status')
    if status and status not in APPROVAL_STATUSES:
        return jsonify({'error': 'Status tidak valid'}), 400

    query = Pengajuan.query
    if status:
        query = query.filter(Pengajuan.status == status)

    records = query.order_by(Pengajuan.created_at.desc()).all()
    return jsonify([record.to_dict() for record in records])


@pengajuan_bp.route('', methods=['POST'])
@auth_required
def create_pengajuan():
    payload, error = validate_payload(PengajuanSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    car_ids = {item.car_id for item in payload.items}
    known = Car.query.filter(Car.id.in_(car_ids), Car.deleted_at.is_(None)).count()
    if known != len(car_ids):
        return jsonify({'error': 'Mobil tidak ditemukan'}), 404

    pengajuan = Pengajuan(
        status='PENDING',
        notes=payload.notes,
        items=[
            PengajuanItem(
                requirement=item.requirement,
                estimation=item.estimation,
                car_id=item.car_id,
                image_url=str(item.image_url) if item.image_url else None,
            )
            for item in payload.items
        ],
    )

    try:
        db.session.add(pengajuan)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create pengajuan")
        return jsonify({'error': 'Gagal membuat pengajuan'}), 500

    return jsonify(pengajuan.to_dict()), 201


def _decide(pengajuan_id, status, notes=None):
    pengajuan = db.session.get(Pengajuan, pengajuan_id)
    if pengajuan is None:
        return jsonify({'error': 'Pengajuan tidak ditemukan'}), 404

    try:
        decide(pengajuan, status, notes)
    except ApprovalError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to decide pengajuan %s", pengajuan_id)
        return jsonify({'error': 'Gagal memproses pengajuan'}), 500

    return jsonify(pengajuan.to_dict())


@pengajuan_bp.route('/<int:pengajuan_id>/approve', methods=['POST'])
@auth_required
def approve_pengajuan(pengajuan_id):
    return _decide(pengajuan_id, 'APPROVED')


@pengajuan_bp.route('/<int:pengajuan_id>/reject', methods=['POST'])
@auth_required
def reject_pengajuan(pengajuan_id):
    payload, error = validate_payload(RejectPengajuanSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400
    return _decide(pengajuan_id, 'REJECTED', payload.reason)
