from akasia.extensions import db
from akasia.models.pengajuan import APPROVAL_STATUSES
from datetime import datetime

TOKEN_TYPES = ('FORM', 'APPROVE')


class Perizinan(db.Model):
    """Trip permission request for a car."""
    __tablename__ = 'perizinan'

    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    purpose = db.Column(db.String(255), nullable=False)
    destination = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    number_of_passengers = db.Column(db.Integer, nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    estimation = db.Column(db.Integer, nullable=False)
    status = db.Column(db.Enum(*APPROVAL_STATUSES, name='perizinan_status'), nullable=False, default='PENDING')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    car = db.relationship('Car')
    tokens = db.relationship('PerizinanToken', backref='perizinan', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'car': self.car.to_summary() if self.car else None,
            'name': self.name,
            'purpose': self.purpose,
            'destination': self.destination,
            'description': self.description,
            'number_of_passengers': self.number_of_passengers,
            'date': self.date.isoformat(),
            'estimation': self.estimation,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class PerizinanToken(db.Model):
    __tablename__ = 'perizinan_tokens'

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, nullable=False)
    type = db.Column(db.Enum(*TOKEN_TYPES, name='perizinan_token_type'), nullable=False)
    perizinan_id = db.Column(db.Integer, db.ForeignKey('perizinan.id'), nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    used_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'token': self.token,
            'type': self.type,
            'perizinan': {
                'id': self.perizinan.id,
                'name': self.perizinan.name,
                'status': self.perizinan.status,
            } if self.perizinan else None,
            'expires_at': self.expires_at.isoformat(),
            'used_at': self.used_at.isoformat() if self.used_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
