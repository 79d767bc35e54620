from datetime import date

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_cors import cross_origin
from sqlalchemy.exc import SQLAlchemyError

from akasia.services.excel_export.generator import LedgerReportGenerator, SpendingReportGenerator
from akasia.utils.auth import auth_required
from akasia.utils.dates import current_hijri

export_bp = Blueprint('export', __name__, url_prefix='/export')

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _send_report(generator):
    try:
        excel_file = generator.generate_report()
    except SQLAlchemyError:
        current_app.logger.exception("Error during report generation")
        return jsonify({'error': 'Report generation failed'}), 500

    return send_file(
        excel_file,
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=generator.filename
    )


@export_bp.route('/ledger', methods=['GET'])
@cross_origin(expose_headers=["Content-Disposition"])
@auth_required
def export_ledger():
    today = current_hijri()
    hijri_year = request.args.get('hijri_year', today['hijri_year'], type=int)
    hijri_month = request.args.get('hijri_month', today['hijri_month'], type=int)
    if not 1 <= hijri_month <= 12:
        return jsonify({'error': 'Bulan hijriah harus antara 1 dan 12'}), 400

    return _send_report(LedgerReportGenerator(hijri_year, hijri_month))


@export_bp.route('/spending', methods=['GET'])
@cross_origin(expose_headers=["Content-Disposition"])
@auth_required
def export_spending():
    today = date.today()
    year = request.args.get('year', today.year, type=int)
    month = request.args.get('month', today.month, type=int)
    if not 1 <= month <= 12:
        return jsonify({'error': 'Bulan harus antara 1 dan 12'}), 400

    return _send_report(SpendingReportGenerator(year, month))
