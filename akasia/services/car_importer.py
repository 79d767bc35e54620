from pathlib import Path

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.services.car_service import CarError, create_car
from akasia.services.error_aggregator import ErrorAggregator

REQUIRED_COLUMNS = ('name', 'license_plate')


def normalize_cell(value) -> str:
    """Normalize incoming cell/string values for consistent comparisons."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    try:
        if pd.isna(value):
            return ""
    except TypeError:
        pass
    return str(value).strip()


def read_spreadsheet(file_storage) -> pd.DataFrame:
    """Load an uploaded CSV or Excel file into a DataFrame with normalized headers."""
    suffix = Path(file_storage.filename or '').suffix.lower()
    if suffix == '.csv':
        df = pd.read_csv(file_storage.stream, dtype=str)
    elif suffix in ('.xlsx', '.xls'):
        df = pd.read_excel(file_storage.stream, dtype=str)
    else:
        raise ValueError('Unsupported file type. Upload a .csv or .xlsx file')

    df.columns = [str(column).strip().lower().replace(' ', '_') for column in df.columns]
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")
    return df


def import_cars(df: pd.DataFrame) -> ErrorAggregator:
    """
    Create one car per row. Each row is committed in its own savepoint so a
    duplicate plate only fails that row.
    """
    aggregator = ErrorAggregator()

    # Spreadsheet row numbers start at 2 (row 1 is the header)
    for index, row in df.iterrows():
        row_number = index + 2
        row_data = {column: normalize_cell(row.get(column)) for column in df.columns}
        name = row_data.get('name')
        license_plate = row_data.get('license_plate')

        if not name or not license_plate:
            aggregator.add_failure(row_number, row_data, 'Nama mobil dan plat nomor wajib diisi')
            continue

        try:
            with db.session.begin_nested():
                create_car(name, license_plate, row_data.get('barcode_string') or None)
        except CarError as exc:
            aggregator.add_failure(row_number, row_data, exc.message)
            continue
        except SQLAlchemyError as exc:
            aggregator.add_failure(row_number, row_data, str(exc.__class__.__name__))
            continue

        aggregator.add_success(license_plate)

    db.session.commit()
    return aggregator
