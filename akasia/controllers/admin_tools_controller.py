from flask import Blueprint, Response, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.services.car_importer import import_cars, read_spreadsheet
from akasia.utils.auth import admin_required

admin_tools_bp = Blueprint("admin_tools", __name__, url_prefix="/admin/tools")


@admin_tools_bp.route("/import-cars", methods=["POST"])
@admin_required()
def import_cars_from_spreadsheet():
    """
    Bulk-create cars from an uploaded CSV/XLSX with ``name``, ``license_plate``
    and optional ``barcode_string`` columns. ``?format=csv`` returns the
    failed rows as a CSV download instead of the JSON summary.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"error": "No file provided"}), 400

    try:
        df = read_spreadsheet(file)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        aggregator = import_cars(df)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to commit car import.")
        return jsonify({"error": "Gagal mengimpor mobil"}), 500

    current_app.logger.info("Car import finished: %s", aggregator.get_summary_dict()["status"])

    if request.args.get("format") == "csv" and aggregator.has_failures:
        return Response(
            aggregator.generate_error_csv_string(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=car_import_errors.csv"}
        )

    return jsonify(aggregator.get_summary_dict())
