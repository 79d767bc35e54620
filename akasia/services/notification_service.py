from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db, whatsapp
from akasia.services.token_service import issue_approval_token

WEEKDAYS_ID = ['Senin', 'Selasa', 'Rabu', 'Kamis', 'Jumat', 'Sabtu', 'Minggu']
MONTHS_ID = [
    '', 'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember'
]


def format_rupiah(amount) -> str:
    return 'Rp ' + f"{int(round(amount)):,}".replace(',', '.')


def format_long_date(value) -> str:
    return f"{WEEKDAYS_ID[value.weekday()]}, {value.day} {MONTHS_ID[value.month]} {value.year}"


def approval_url(token) -> str:
    base_url = current_app.config['APP_BASE_URL'].rstrip('/')
    return f"{base_url}/perizinan/approve/{token.token}"


def format_perizinan_message(perizinan, url: str) -> str:
    car = perizinan.car
    return (
        "📋 *PERIZINAN BARU*\n"
        "\n"
        f"*Pemohon:* {perizinan.name}\n"
        f"*Kendaraan:* {car.name} ({car.license_plate or '-'})\n"
        f"*Keperluan:* {perizinan.purpose}\n"
        f"*Tujuan:* {perizinan.destination}\n"
        f"*Tanggal:* {format_long_date(perizinan.date)}\n"
        f"*Jumlah Penumpang:* {perizinan.number_of_passengers} orang\n"
        f"*Estimasi:* {format_rupiah(perizinan.estimation)}\n"
        "\n"
        "🔗 *Link Approval:*\n"
        f"{url}\n"
        "\n"
        "_Klik link untuk menyetujui perizinan_"
    )


def notify_new_perizinan(perizinan) -> dict:
    """
    Issue an approval token for a freshly created perizinan and send the
    approval link over WhatsApp. Commits the token; delivery failures are
    reported, never raised.
    """
    token = issue_approval_token(perizinan)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to issue approval token for perizinan %s", perizinan.id)
        return {'success': False, 'error': 'Token approval gagal dibuat'}

    result = whatsapp.send(format_perizinan_message(perizinan, approval_url(token)))
    result['approval_token'] = token.token
    return result
