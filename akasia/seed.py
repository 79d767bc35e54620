from flask import current_app

from akasia.extensions import db
from akasia.models.car import Car
from akasia.models.user import User
from akasia.services.wallet_service import get_or_create_wallet

DEFAULT_USERS = [
    {'name': 'Administrator', 'username': 'admin', 'password': 'admin123', 'role': 'ADMIN'},
    {'name': 'Operator', 'username': 'operator', 'password': 'user123', 'role': 'USER'},
]

SAMPLE_CARS = [
    {'name': 'Toyota Innova', 'license_plate': 'B 1234 XYZ', 'barcode_string': 'CAR-001'},
    {'name': 'Mitsubishi Pajero', 'license_plate': 'B 5678 ABC', 'barcode_string': 'CAR-002'},
    {'name': 'Toyota Avanza', 'license_plate': 'B 9012 DEF', 'barcode_string': 'CAR-003'},
]


def seed_database():
    """Create the default users, sample cars and the global wallet. Existing rows are left alone."""
    for data in DEFAULT_USERS:
        if User.query.filter_by(username=data['username']).first():
            continue
        user = User(name=data['name'], username=data['username'], role=data['role'])
        user.set_password(data['password'])
        db.session.add(user)
        current_app.logger.info("Created user %s", data['username'])

    for data in SAMPLE_CARS:
        if Car.query.filter_by(license_plate=data['license_plate']).first():
            continue
        db.session.add(Car(**data))
        current_app.logger.info("Created car %s", data['name'])

    get_or_create_wallet()
    db.session.commit()
