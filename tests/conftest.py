"""
Pytest fixtures for the Akasia API test suite.

Provides:
- An application bound to an in-memory SQLite database
- Users for each role and matching Authorization headers
- Factories for cars, transactions and spending tasks
- Fakes for the object storage and WhatsApp gateway
"""

from datetime import datetime
from io import BytesIO

import pytest
from flask_jwt_extended import create_access_token
from PIL import Image

from akasia import create_app
from akasia.config.config import Config
from akasia.extensions import db, s3
from akasia.models.car import Car
from akasia.models.spending import SpendingTask, TaskFunding
from akasia.models.transaction import Transaction
from akasia.models.user import User


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    JWT_COOKIE_CSRF_PROTECT = False

    S3_ENDPOINT_URL = 'http://storage.test'
    AWS_ACCESS_KEY_ID = 'test'
    AWS_SECRET_ACCESS_KEY = 'test'
    AWS_REGION = 'us-east-1'
    S3_BUCKET = 'akasia'
    S3_PUBLIC_URL = 'http://storage.test/storage/v1/object/public'

    WA_API_URL = None
    WA_SESSION_ID = None
    WA_API_KEY = None
    WA_RECIPIENT = None

    APP_BASE_URL = 'http://app.test'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(app):
    def _create_user(username, role='USER', password='secret123', **kwargs):
        user = User(name=kwargs.pop('name', username.title()), username=username, role=role, **kwargs)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _create_user


@pytest.fixture
def admin(create_user):
    return create_user('admin', role='ADMIN')


@pytest.fixture
def operator(create_user):
    return create_user('operator', role='USER')


@pytest.fixture
def driver(create_user):
    return create_user('driver', role='DRIVER')


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims=user.get_jwt_claims())
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def operator_headers(operator, auth_headers):
    return auth_headers(operator)


@pytest.fixture
def create_car(app):
    def _create_car(name='Toyota Innova', license_plate='B 1234 XYZ', **kwargs):
        car = Car(name=name, license_plate=license_plate, **kwargs)
        db.session.add(car)
        db.session.commit()
        return car
    return _create_car


@pytest.fixture
def create_transaction(app, operator):
    def _create_transaction(transaction_type, amount, date, description='Test', deleted_at=None):
        transaction = Transaction(
            type=transaction_type,
            amount=amount,
            description=description,
            date=date,
            user=operator,
            deleted_at=deleted_at,
        )
        db.session.add(transaction)
        db.session.commit()
        return transaction
    return _create_transaction


@pytest.fixture
def create_task(app, operator):
    def _create_task(title='Belanja bulanan', funding_amount=None):
        task = SpendingTask(title=title, status='DRAFT', created_by=operator)
        if funding_amount is not None:
            task.funding = TaskFunding(amount=funding_amount, received_at=datetime.utcnow())
        db.session.add(task)
        db.session.commit()
        return task
    return _create_task


@pytest.fixture
def uploads(monkeypatch):
    """Replace bucket writes with an in-memory record of uploaded objects."""
    stored = []

    def fake_upload(key, body, content_type):
        stored.append({'key': key, 'body': body, 'content_type': content_type})
        return s3.url_for(key)

    monkeypatch.setattr(s3, 'upload', fake_upload)
    return stored


def make_image_bytes(width=2000, height=1000, fmt='PNG', color=(200, 30, 30)):
    image = Image.new('RGB', (width, height), color)
    output = BytesIO()
    image.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def image_file():
    def _image_file(width=2000, height=1000, filename='nota.png'):
        return (BytesIO(make_image_bytes(width, height)), filename, 'image/png')
    return _image_file


@pytest.fixture
def image_bytes():
    return make_image_bytes
