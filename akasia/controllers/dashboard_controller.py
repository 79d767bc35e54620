from datetime import date

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from akasia.controllers.tax_controller import upcoming_taxes
from akasia.extensions import db
from akasia.models.car import Car, UsageRecord
from akasia.models.perizinan import Perizinan
from akasia.services.balance_service import get_balance, get_monthly_stats
from akasia.services.wallet_service import get_or_create_wallet, get_wallet_balance
from akasia.utils.auth import auth_required

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('', methods=['GET'])
@auth_required
def dashboard():
    today = date.today()
    active_usages = (
        UsageRecord.query
        .filter(UsageRecord.end_time.is_(None))
        .order_by(UsageRecord.start_time.desc())
        .all()
    )
    wallet = get_or_create_wallet()
    wallet_balance = get_wallet_balance(wallet)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create wallet for dashboard")
        return jsonify({'error': 'Gagal memuat dashboard'}), 500

    return jsonify({
        'balance': get_balance(),
        'monthly_stats': get_monthly_stats(today.year, today.month),
        'car_count': Car.query.filter(Car.deleted_at.is_(None)).count(),
        'active_usages': [usage.to_dict() for usage in active_usages],
        'upcoming_taxes': [tax.to_dict() for tax in upcoming_taxes()],
        'pending_perizinan_count': Perizinan.query.filter_by(status='PENDING').count(),
        'wallet_balance': wallet_balance,
    })
