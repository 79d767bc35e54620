from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.wallet import WalletEntry
from akasia.schemas.spending import WalletEntrySchema
from akasia.services.wallet_service import get_or_create_wallet, get_wallet_overview
from akasia.utils.auth import auth_required, current_user
from akasia.utils.validation import validate_payload

wallet_bp = Blueprint('wallet', __name__, url_prefix='/wallet')


@wallet_bp.route('', methods=['GET'])
@auth_required
def overview():
    limit = request.args.get('limit', 25, type=int)
    data = get_wallet_overview(limit)
    # The wallet row may have just been created
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to load wallet overview")
        return jsonify({'error': 'Gagal memuat dompet'}), 500

    return jsonify({
        'wallet': data['wallet'].to_dict(),
        'balance': data['balance'],
        'entries': [entry.to_dict() for entry in data['entries']],
    })


@wallet_bp.route('/entries', methods=['POST'])
@auth_required
def create_entry():
    payload, error = validate_payload(WalletEntrySchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    entry = WalletEntry(
        wallet=get_or_create_wallet(),
        type=payload.type,
        source='MANUAL',
        amount=payload.amount,
        description=payload.description,
        occurred_at=payload.occurred_at or datetime.utcnow(),
        attachment_url=str(payload.attachment_url) if payload.attachment_url else None,
        created_by=current_user(),
    )

    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create wallet entry")
        return jsonify({'error': 'Gagal menyimpan transaksi dompet'}), 500

    return jsonify(entry.to_dict()), 201
