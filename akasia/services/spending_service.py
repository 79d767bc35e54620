from dataclasses import asdict, dataclass
from datetime import datetime

from akasia.extensions import db
from akasia.models.spending import SpendingTask, TaskSettlement

STATUS_LABELS = {
    'DRAFT': 'Draf',
    'FUNDED': 'Didanai',
    'SPENDING': 'Belanja',
    'NEEDS_REFUND': 'Perlu Pengembalian',
    'NEEDS_REIMBURSE': 'Perlu Penggantian',
    'SETTLED': 'Selesai',
}


class SpendingTaskError(Exception):
    """Business-rule violation on a spending task; ``code`` is returned to the client."""

    def __init__(self, code, status_code=400):
        super().__init__(code)
        self.code = code
        self.status_code = status_code


@dataclass
class TaskSummary:
    budget: int
    total_receipts: int
    diff: int
    refund_due: int
    reimburse_due: int
    is_locked: bool

    def to_dict(self):
        return asdict(self)


def get_status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def calculate_summary(task: SpendingTask) -> TaskSummary:
    budget = task.funding.amount if task.funding else 0
    total_receipts = sum(receipt.total_amount for receipt in task.receipts)
    diff = budget - total_receipts
    return TaskSummary(
        budget=budget,
        total_receipts=total_receipts,
        diff=diff,
        refund_due=diff if diff > 0 else 0,
        reimburse_due=-diff if diff < 0 else 0,
        is_locked=any(settlement.status == 'DONE' for settlement in task.settlements),
    )


def derive_status(has_funding: bool, summary: TaskSummary) -> str:
    """Status implied by funding, receipts and settlements. SPENDING is never derived."""
    if summary.is_locked:
        return 'SETTLED'
    if not has_funding:
        return 'DRAFT'
    if summary.total_receipts == 0:
        return 'FUNDED'
    if summary.refund_due > 0:
        return 'NEEDS_REFUND'
    if summary.reimburse_due > 0:
        return 'NEEDS_REIMBURSE'
    return 'SETTLED'


def get_task_or_404(task_id) -> SpendingTask:
    task = db.session.get(SpendingTask, task_id)
    if task is None:
        raise SpendingTaskError('Anggaran tidak ditemukan', status_code=404)
    return task


def ensure_unlocked(task: SpendingTask, code='TASK_LOCKED') -> TaskSummary:
    summary = calculate_summary(task)
    if summary.is_locked:
        raise SpendingTaskError(code)
    return summary


def _sync_pending_settlement(task: SpendingTask, settlement_type: str, amount_due: int):
    settlement = task.settlement_of(settlement_type)
    if amount_due > 0:
        if settlement is None:
            task.settlements.append(TaskSettlement(type=settlement_type, amount=amount_due, status='PENDING'))
        else:
            settlement.amount = amount_due
            settlement.status = 'PENDING'
            settlement.done_at = None
    elif settlement is not None and settlement.status == 'PENDING':
        task.settlements.remove(settlement)


def recompute_task(task: SpendingTask) -> TaskSummary:
    """
    Re-derive the task status and its pending settlements from funding and
    receipts. Runs in the caller's session; the caller commits.
    """
    summary = calculate_summary(task)
    has_funding = task.funding is not None

    if not summary.is_locked and has_funding:
        _sync_pending_settlement(task, 'REFUND', summary.refund_due)
        _sync_pending_settlement(task, 'REIMBURSE', summary.reimburse_due)

    next_status = derive_status(has_funding, summary)
    if task.status != next_status:
        task.status = next_status

    return summary


def mark_settlement_done(task: SpendingTask, settlement_type: str, notes=None) -> TaskSummary:
    summary = calculate_summary(task)
    amount_due = summary.refund_due if settlement_type == 'REFUND' else summary.reimburse_due
    settlement = task.settlement_of(settlement_type)
    if amount_due <= 0 or (settlement is not None and settlement.status == 'DONE'):
        raise SpendingTaskError('SETTLEMENT_NOT_REQUIRED')

    if settlement is None:
        settlement = TaskSettlement(type=settlement_type)
        task.settlements.append(settlement)

    settlement.amount = amount_due
    settlement.status = 'DONE'
    settlement.done_at = datetime.utcnow()
    settlement.notes = notes

    return recompute_task(task)


def serialize_task(task: SpendingTask, detailed=False) -> dict:
    data = task.to_dict()
    data['status_label'] = get_status_label(task.status)
    data['summary'] = calculate_summary(task).to_dict()
    if detailed:
        data['receipts'] = [receipt.to_dict() for receipt in task.receipts]
        data['settlements'] = [settlement.to_dict() for settlement in task.settlements]
    return data
