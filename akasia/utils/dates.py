import calendar
from datetime import date, datetime, timedelta

from flask import current_app
from hijridate import Gregorian, Hijri

HIJRI_MONTH_NAMES = [
    '', 'Muharram', 'Safar', "Rabi'ul Awal", "Rabi'ul Akhir",
    'Jumadal Ula', 'Jumadal Akhirah', 'Rajab', "Sya'ban",
    'Ramadhan', 'Syawwal', "Dzulqa'dah", 'Dzulhijjah'
]


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant of a Gregorian month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59, 999999)
    return start, end


def current_month_range() -> tuple[datetime, datetime]:
    today = date.today()
    return month_range(today.year, today.month)


def _to_date(gregorian) -> date:
    return date(gregorian.year, gregorian.month, gregorian.day)


def hijri_month_range(hijri_year: int, hijri_month: int) -> tuple[datetime, datetime]:
    """
    Gregorian start/end of a Hijri (Umm al-Qura) month.
    Falls back to the current Gregorian month when the conversion fails.
    """
    try:
        start = _to_date(Hijri(hijri_year, hijri_month, 1).to_gregorian())
        next_year, next_month = (hijri_year + 1, 1) if hijri_month == 12 else (hijri_year, hijri_month + 1)
        end = _to_date(Hijri(next_year, next_month, 1).to_gregorian()) - timedelta(days=1)
    except (ValueError, OverflowError) as exc:
        current_app.logger.warning(
            "Hijri conversion failed for %s/%s: %s. Using Gregorian month fallback",
            hijri_year, hijri_month, exc
        )
        return current_month_range()

    return (
        datetime(start.year, start.month, start.day),
        datetime(end.year, end.month, end.day, 23, 59, 59, 999999),
    )


def current_hijri() -> dict:
    today = Gregorian.fromdate(date.today()).to_hijri()
    return {
        'hijri_year': today.year,
        'hijri_month': today.month,
        'hijri_month_name': HIJRI_MONTH_NAMES[today.month],
        'hijri_date': f"{today.day} {HIJRI_MONTH_NAMES[today.month]} {today.year}",
    }


def format_hijri_date(value) -> str:
    hijri = Gregorian(value.year, value.month, value.day).to_hijri()
    return f"{hijri.day:02d}-{hijri.month:02d}-{hijri.year}"
