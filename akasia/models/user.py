from akasia.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime

USER_ROLES = ('ADMIN', 'USER', 'DRIVER')


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.Enum(*USER_ROLES, name='user_role'), nullable=False, default='USER')
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    transactions = db.relationship('Transaction', backref='user', lazy=True)
    usage_records = db.relationship('UsageRecord', backref='user', lazy=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == 'ADMIN'

    def get_jwt_claims(self):
        """Return additional claims for JWT token"""
        return {
            'username': self.username,
            'role': self.role,
        }

    def to_dict(self, with_counts=False):
        data = {
            'id': self.id,
            'name': self.name,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if with_counts:
            data['counts'] = {
                'transactions': len(self.transactions),
                'usage_records': len(self.usage_records),
            }
        return data
