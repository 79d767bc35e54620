from akasia.extensions import db
from datetime import datetime

APPROVAL_STATUSES = ('PENDING', 'APPROVED', 'REJECTED')


class Pengajuan(db.Model):
    """Procurement request with one or more car-bound line items."""
    __tablename__ = 'pengajuan'

    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.Enum(*APPROVAL_STATUSES, name='pengajuan_status'), nullable=False, default='PENDING')
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship('PengajuanItem', backref='pengajuan', lazy=True, cascade='all, delete-orphan')

    @property
    def total_estimation(self):
        return sum(item.estimation for item in self.items)

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'notes': self.notes,
            'items': [item.to_dict() for item in self.items],
            'total_estimation': self.total_estimation,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class PengajuanItem(db.Model):
    __tablename__ = 'pengajuan_items'

    id = db.Column(db.Integer, primary_key=True)
    pengajuan_id = db.Column(db.Integer, db.ForeignKey('pengajuan.id'), nullable=False)
    requirement = db.Column(db.String(255), nullable=False)
    estimation = db.Column(db.Integer, nullable=False)
    car_id = db.Column(db.Integer, db.ForeignKey('cars.id'), nullable=False)
    image_url = db.Column(db.String(500), nullable=True)

    car = db.relationship('Car')

    def to_dict(self):
        return {
            'id': self.id,
            'requirement': self.requirement,
            'estimation': self.estimation,
            'car': self.car.to_summary() if self.car else None,
            'image_url': self.image_url,
        }
