from akasia.extensions import db
from datetime import datetime

CAR_STATUSES = ('AVAILABLE', 'IN_USE')


class Car(db.Model):
    __tablename__ = 'cars'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    license_plate = db.Column(db.String(20), unique=True, nullable=False)
    barcode_string = db.Column(db.String(255), nullable=True)
    status = db.Column(db.Enum(*CAR_STATUSES, name='car_status'), nullable=False, default='AVAILABLE')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    usage_records = db.relationship('UsageRecord', backref='car', lazy=True,
                                    order_by='UsageRecord.start_time.desc()')
    fuel_purchases = db.relationship('FuelPurchase', backref='car', lazy=True,
                                     order_by='FuelPurchase.created_at.desc()')
    taxes = db.relationship('Tax', backref='car', lazy=True, order_by='Tax.due_date.desc()')

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.name,
            'license_plate': self.license_plate,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'license_plate': self.license_plate,
            'barcode_string': self.barcode_string,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class UsageRecord(db.Model):
    __tablename__ = 'usage_records'

    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    purpose = db.Column(db.String(255), nullable=False)
    destination = db.Column(db.String(255), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_active(self):
        return self.end_time is None

    def to_dict(self):
        return {
            'id': self.id,
            'car': self.car.to_summary() if self.car else None,
            'car_status': self.car.status if self.car else None,
            'user': {'id': self.user.id, 'name': self.user.name, 'username': self.user.username} if self.user else None,
            'purpose': self.purpose,
            'destination': self.destination,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None,
        }
