from datetime import date, datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.spending import (
    SPENDING_TASK_STATUSES, Cashback, Receipt, ReceiptAttachment, ReceiptItem, SpendingTask,
    TaskFunding
)
from akasia.models.wallet import WalletEntry
from akasia.schemas.spending import (
    CashbackSchema, FundingSchema, ReceiptSchema, SettlementSchema, TaskSchema
)
from akasia.services.image_service import ImageUploadError, delete_uploaded_files, upload_compressed_image
from akasia.services.reporting_service import get_spending_report
from akasia.services.spending_service import (
    SpendingTaskError, ensure_unlocked, get_task_or_404, mark_settlement_done,
    recompute_task, serialize_task
)
from akasia.services.wallet_service import get_or_create_wallet
from akasia.utils.auth import auth_required, current_user
from akasia.utils.validation import request_payload, validate_payload

spending_bp = Blueprint('spending', __name__, url_prefix='/spending')

LOCKED_MESSAGE = 'Anggaran sudah dikunci'


@spending_bp.errorhandler(SpendingTaskError)
def handle_spending_error(error):
    return jsonify({'error': error.code}), error.status_code


def _commit(action, task_id):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to %s for spending task %s", action, task_id)
        raise SpendingTaskError('Gagal menyimpan data anggaran', status_code=500)


def _get_receipt_or_404(receipt_id) -> Receipt:
    receipt = db.session.get(Receipt, receipt_id)
    if receipt is None:
        raise SpendingTaskError('Nota tidak ditemukan', status_code=404)
    return receipt


# ----------------------------------------------------------------------------
# Tasks
# ----------------------------------------------------------------------------
@spending_bp.route('/tasks', methods=['GET'])
@auth_required
def list_tasks():
    status = request.args.get('status')
    if status and status not in SPENDING_TASK_STATUSES:
        return jsonify({'error': 'Status tidak valid'}), 400

    query = SpendingTask.query
    if status:
        query = query.filter(SpendingTask.status == status)

    tasks = query.order_by(SpendingTask.created_at.desc()).all()
    return jsonify([serialize_task(task) for task in tasks])


@spending_bp.route('/tasks/<int:task_id>', methods=['GET'])
@auth_required
def get_task(task_id):
    return jsonify(serialize_task(get_task_or_404(task_id), detailed=True))


@spending_bp.route('/tasks', methods=['POST'])
@auth_required
def create_task():
    payload, error = validate_payload(TaskSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    task = SpendingTask(
        title=payload.title,
        description=payload.description,
        status='DRAFT',
        created_by=current_user(),
    )
    db.session.add(task)
    _commit('create task', None)
    return jsonify(serialize_task(task)), 201


@spending_bp.route('/tasks/<int:task_id>', methods=['PUT'])
@auth_required
def update_task(task_id):
    task = get_task_or_404(task_id)
    ensure_unlocked(task, code=LOCKED_MESSAGE)

    payload, error = validate_payload(TaskSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    task.title = payload.title
    task.description = payload.description
    _commit('update task', task_id)
    return jsonify(serialize_task(task))


# ----------------------------------------------------------------------------
# Funding
# ----------------------------------------------------------------------------
@spending_bp.route('/tasks/<int:task_id>/funding', methods=['POST'])
@auth_required
def create_funding(task_id):
    task = get_task_or_404(task_id)
    ensure_unlocked(task)

    if task.funding is not None:
        raise SpendingTaskError('FUNDING_ALREADY_EXISTS')

    payload, error = validate_payload(FundingSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    task.funding = TaskFunding(
        amount=payload.amount,
        received_at=payload.received_at or datetime.utcnow(),
        source=payload.source or 'Yayasan',
        notes=payload.notes,
    )
    recompute_task(task)
    _commit('create funding', task_id)
    return jsonify(serialize_task(task)), 201


@spending_bp.route('/tasks/<int:task_id>/funding', methods=['PUT'])
@auth_required
def update_funding(task_id):
    task = get_task_or_404(task_id)
    ensure_unlocked(task)

    if task.funding is None:
        return jsonify({'error': 'Pendanaan tidak ditemukan'}), 404

    payload, error = validate_payload(FundingSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    task.funding.amount = payload.amount
    task.funding.received_at = payload.received_at or datetime.utcnow()
    task.funding.source = payload.source or 'Yayasan'
    task.funding.notes = payload.notes
    recompute_task(task)
    _commit('update funding', task_id)
    return jsonify(serialize_task(task))


# ----------------------------------------------------------------------------
# Receipts
# ----------------------------------------------------------------------------
@spending_bp.route('/tasks/<int:task_id>/receipts', methods=['POST'])
@auth_required
def create_receipt(task_id):
    """
    Multipart request: receipt JSON in ``payload`` and one or more images in
    ``files``. Images are compressed before upload.
    """
    task = get_task_or_404(task_id)
    summary = ensure_unlocked(task, code=LOCKED_MESSAGE)

    if summary.budget <= 0:
        return jsonify({'error': 'Pendanaan wajib diisi'}), 400

    payload, error = validate_payload(ReceiptSchema, request_payload(request))
    if error:
        return jsonify({'error': error}), 400

    files = [file for file in request.files.getlist('files') if file and file.filename]
    if not files:
        return jsonify({'error': 'Lampiran wajib diunggah'}), 400

    if payload.items_total != payload.total_amount:
        return jsonify({'error': f'Total nota harus sama dengan jumlah item ({payload.items_total})'}), 400

    try:
        uploaded = [upload_compressed_image(file, 'receipts/spending') for file in files]
    except ImageUploadError as e:
        return jsonify({'error': str(e)}), e.status_code

    receipt = Receipt(
        vendor=payload.vendor,
        receipt_no=payload.receipt_no,
        receipt_date=payload.receipt_date,
        notes=payload.notes,
        total_amount=payload.total_amount,
        items=[
            ReceiptItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total,
            )
            for item in payload.items
        ],
        attachments=[ReceiptAttachment(**attachment) for attachment in uploaded],
    )
    task.receipts.append(receipt)
    recompute_task(task)
    _commit('create receipt', task_id)
    return jsonify(receipt.to_dict()), 201


@spending_bp.route('/receipts/<int:receipt_id>', methods=['DELETE'])
@auth_required
def delete_receipt(receipt_id):
    receipt = _get_receipt_or_404(receipt_id)
    task = get_task_or_404(receipt.task_id)
    ensure_unlocked(task, code=LOCKED_MESSAGE)

    attachment_urls = [attachment.file_url for attachment in receipt.attachments]
    task.receipts.remove(receipt)
    recompute_task(task)
    _commit('delete receipt', task.id)

    delete_uploaded_files(attachment_urls)
    return jsonify(serialize_task(task))


# ----------------------------------------------------------------------------
# Settlements
# ----------------------------------------------------------------------------
def _settle(task_id, settlement_type):
    task = get_task_or_404(task_id)

    payload, error = validate_payload(SettlementSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    mark_settlement_done(task, settlement_type, payload.notes)
    _commit(f'mark {settlement_type.lower()} done', task_id)
    return jsonify(serialize_task(task, detailed=True))


@spending_bp.route('/tasks/<int:task_id>/refund', methods=['POST'])
@auth_required
def mark_refund_done(task_id):
    return _settle(task_id, 'REFUND')


@spending_bp.route('/tasks/<int:task_id>/reimburse', methods=['POST'])
@auth_required
def mark_reimburse_done(task_id):
    return _settle(task_id, 'REIMBURSE')


# ----------------------------------------------------------------------------
# Cashback
# ----------------------------------------------------------------------------
@spending_bp.route('/receipts/<int:receipt_id>/cashback', methods=['POST'])
@auth_required
def create_cashback(receipt_id):
    """Record a cashback on a receipt and credit it to the global wallet in one commit."""
    payload, error = validate_payload(CashbackSchema, request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400

    receipt = _get_receipt_or_404(receipt_id)
    task = get_task_or_404(receipt.task_id)
    ensure_unlocked(task)

    occurred_at = payload.occurred_at or datetime.utcnow()
    user = current_user()

    cashback = Cashback(
        amount=payload.amount,
        vendor=payload.vendor or receipt.vendor,
        notes=payload.notes,
        occurred_at=occurred_at,
        created_by_id=user.id,
    )
    receipt.cashbacks.append(cashback)
    db.session.flush()

    wallet_entry = WalletEntry(
        wallet=get_or_create_wallet(),
        type='CREDIT',
        source='CASHBACK',
        amount=payload.amount,
        description=payload.vendor or receipt.vendor or payload.notes,
        occurred_at=occurred_at,
        task_id=task.id,
        cashback_id=cashback.id,
        created_by=user,
    )
    db.session.add(wallet_entry)
    _commit('record cashback', task.id)

    return jsonify({
        'cashback': cashback.to_dict(),
        'wallet_entry': wallet_entry.to_dict(),
    }), 201


# ----------------------------------------------------------------------------
# Report
# ----------------------------------------------------------------------------
@spending_bp.route('/report', methods=['GET'])
@auth_required
def spending_report():
    today = date.today()
    year = request.args.get('year', today.year, type=int)
    month = request.args.get('month', today.month, type=int)
    if not 1 <= month <= 12:
        return jsonify({'error': 'Bulan harus antara 1 dan 12'}), 400

    return jsonify(get_spending_report(year, month))
