import re
from datetime import datetime

from akasia.extensions import db
from akasia.models.car import Car, UsageRecord


class CarError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def default_barcode(license_plate: str) -> str:
    return re.sub(r'\s+', '-', license_plate.strip())


def find_car_by_plate(license_plate, exclude_id=None):
    query = Car.query.filter(Car.license_plate == license_plate)
    if exclude_id is not None:
        query = query.filter(Car.id != exclude_id)
    return query.first()


def create_car(name, license_plate, barcode_string=None) -> Car:
    """Add a car to the session after checking the plate is free; the caller commits."""
    if find_car_by_plate(license_plate) is not None:
        raise CarError('Plat nomor sudah terdaftar', status_code=409)

    car = Car(
        name=name,
        license_plate=license_plate,
        barcode_string=barcode_string or default_barcode(license_plate),
    )
    db.session.add(car)
    return car


def get_active_usage_for_user(user_id):
    return (
        UsageRecord.query
        .filter(UsageRecord.user_id == user_id, UsageRecord.end_time.is_(None))
        .order_by(UsageRecord.start_time.desc())
        .first()
    )


def start_usage(user, car_id, purpose, destination, start_time) -> UsageRecord:
    active = get_active_usage_for_user(user.id)
    if active is not None:
        raise CarError(
            f"Anda masih mengendarai {active.car.name}. "
            "Selesaikan dulu sebelum menggunakan kendaraan lain."
        )

    car = db.session.get(Car, car_id)
    if car is None or car.deleted_at is not None:
        raise CarError('Kendaraan tidak ditemukan', status_code=404)
    if car.status != 'AVAILABLE':
        raise CarError(f"Kendaraan {car.name} sedang tidak tersedia")

    usage = UsageRecord(
        car=car,
        user=user,
        purpose=purpose,
        destination=destination,
        start_time=start_time,
    )
    car.status = 'IN_USE'
    db.session.add(usage)
    return usage


def end_usage(usage_id, end_time=None) -> UsageRecord:
    usage = db.session.get(UsageRecord, usage_id)
    if usage is None:
        raise CarError('Record tidak ditemukan', status_code=404)
    if usage.end_time is not None:
        raise CarError('Penggunaan sudah selesai')

    usage.end_time = end_time or datetime.utcnow()
    usage.car.status = 'AVAILABLE'
    return usage
