from datetime import datetime

from sqlalchemy import func

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.fuel_purchase import FuelPurchase
from akasia.models.spending import SpendingTask, TaskFunding
from akasia.models.transaction import Transaction
from akasia.services.spending_service import calculate_summary, get_status_label
from akasia.utils.dates import HIJRI_MONTH_NAMES, hijri_month_range, month_range


def _settlement_dict(settlement):
    if settlement is None:
        return None
    return {
        'status': settlement.status,
        'amount': settlement.amount,
        'done_at': settlement.done_at.isoformat() if settlement.done_at else None,
    }


def get_spending_report(year: int, month: int) -> dict:
    """
    Tasks funded within the month (newest funding first) with their
    settlement position, plus tasks created in the month that have no
    funding yet.
    """
    start, end = month_range(year, month)

    tasks = (
        SpendingTask.query
        .join(TaskFunding)
        .filter(TaskFunding.received_at >= start, TaskFunding.received_at <= end)
        .order_by(TaskFunding.received_at.desc())
        .all()
    )

    totals = {
        'total_funding': 0,
        'total_receipts': 0,
        'total_refund_due': 0,
        'total_reimburse_due': 0,
        'tasks_without_receipts': 0,
    }
    report_tasks = []
    for task in tasks:
        summary = calculate_summary(task)
        totals['total_funding'] += summary.budget
        totals['total_receipts'] += summary.total_receipts
        totals['total_refund_due'] += summary.refund_due
        totals['total_reimburse_due'] += summary.reimburse_due
        if summary.total_receipts == 0:
            totals['tasks_without_receipts'] += 1

        report_tasks.append({
            'id': task.id,
            'title': task.title,
            'created_at': task.created_at.isoformat() if task.created_at else None,
            'created_by': task.created_by.name if task.created_by else None,
            'status': task.status,
            'status_label': get_status_label(task.status),
            'funding': task.funding.to_dict(),
            'receipts_total': summary.total_receipts,
            'diff': summary.diff,
            'refund_due': summary.refund_due,
            'reimburse_due': summary.reimburse_due,
            'refund_settlement': _settlement_dict(task.settlement_of('REFUND')),
            'reimburse_settlement': _settlement_dict(task.settlement_of('REIMBURSE')),
        })

    unfunded_tasks = (
        SpendingTask.query
        .filter(
            ~SpendingTask.funding.has(),
            SpendingTask.created_at >= start,
            SpendingTask.created_at <= end
        )
        .order_by(SpendingTask.created_at.desc())
        .all()
    )

    totals['task_count'] = len(report_tasks)
    totals['unfunded_count'] = len(unfunded_tasks)

    return {
        'period': {
            'year': year,
            'month': month,
            'start_date': start.isoformat(),
            'end_date': end.isoformat(),
        },
        'totals': totals,
        'tasks': report_tasks,
        'unfunded_tasks': [
            {
                'id': task.id,
                'title': task.title,
                'created_at': task.created_at.isoformat() if task.created_at else None,
                'created_by': task.created_by.name if task.created_by else None,
            }
            for task in unfunded_tasks
        ],
    }


def _sum_transactions(transaction_type, start: datetime, end: datetime) -> int:
    total = db.session.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
        Transaction.type == transaction_type,
        Transaction.date >= start,
        Transaction.date <= end,
        Transaction.deleted_at.is_(None)
    ).scalar()
    return int(total or 0)


def get_fuel_monthly_report(hijri_year: int, hijri_month: int) -> dict:
    start, end = hijri_month_range(hijri_year, hijri_month)

    total_income = _sum_transactions('INCOME', start, end)
    total_expense = _sum_transactions('FUEL_PURCHASE', start, end)

    per_car = (
        db.session.query(
            Car.id,
            Car.name,
            Car.license_plate,
            func.coalesce(func.sum(FuelPurchase.liter_amount), 0),
            func.coalesce(func.sum(FuelPurchase.total_amount), 0),
        )
        .join(FuelPurchase, FuelPurchase.car_id == Car.id)
        .join(Transaction, FuelPurchase.transaction_id == Transaction.id)
        .filter(
            Transaction.date >= start,
            Transaction.date <= end,
            Transaction.deleted_at.is_(None)
        )
        .group_by(Car.id, Car.name, Car.license_plate)
        .all()
    )

    return {
        'hijri_month': HIJRI_MONTH_NAMES[hijri_month] if 1 <= hijri_month <= 12 else None,
        'hijri_year': hijri_year,
        'gregorian_start': start.isoformat(),
        'gregorian_end': end.isoformat(),
        'total_income': total_income,
        'total_expense': total_expense,
        'balance': total_income - total_expense,
        'fuel_by_car': [
            {
                'car_id': car_id,
                'car_name': name,
                'car_plate': plate,
                'liter_amount': float(liters),
                'total_amount': int(amount),
            }
            for car_id, name, plate, liters, amount in per_car
        ],
    }
