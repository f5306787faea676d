"""
VaultGuard - test configuration and fixtures
"""
import io
import os

import pytest

from config import Config
from app import create_app, db
from app.models import User, Document, Activity
from app.models.document import kind_for

PASSWORD = 'Secr3t-Passw0rd!'


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = 'test-secret-key-for-testing-only'
        SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        UPLOAD_FOLDER = str(tmp_path / 'uploads')
        BCRYPT_LOG_ROUNDS = 4
        MAIL_SUPPRESS_SEND = True
        MAIL_DEFAULT_SENDER = 'VaultGuard <no-reply@vaultguard.test>'

    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def create_user(app, email='alice@example.com', password=PASSWORD, full_name='Alice Smith'):
    with app.app_context():
        user = User(email=email, full_name=full_name)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def login(client, email='alice@example.com', password=PASSWORD, **extra):
    return client.post('/auth/login', data=dict(email=email, password=password, **extra))


def upload(client, name='report.pdf', content=b'%PDF-1.4 test', **extra):
    data = {'file': (io.BytesIO(content), name)}
    data.update(extra)
    return client.post('/documents/upload', data=data, content_type='multipart/form-data')


def add_document(app, owner_id, name, size=100, uploaded_at=None, folder_id=None):
    """Insert a document row plus its bytes without going through a request."""
    with app.app_context():
        filename = f"{owner_id}-{name}"
        with open(os.path.join(app.config['UPLOAD_FOLDER'], filename), 'wb') as fh:
            fh.write(b'x' * min(size, 1024))
        doc = Document(name=name, filename=filename, size=size, kind=kind_for(name),
                       owner_id=owner_id, folder_id=folder_id, mime_type='application/octet-stream')
        if uploaded_at:
            doc.uploaded_at = uploaded_at
        db.session.add(doc)
        db.session.commit()
        return doc.id


def add_activity(app, user_id, action, document_name=None, timestamp=None, owner_id=None, ip='10.0.0.1'):
    with app.app_context():
        act = Activity(user_id=user_id, owner_id=owner_id or user_id, action=action,
                       document_name=document_name, ip_address=ip)
        if timestamp:
            act.timestamp = timestamp
        db.session.add(act)
        db.session.commit()
        return act.id


@pytest.fixture
def alice(app):
    return create_user(app)


@pytest.fixture
def bob(app):
    return create_user(app, email='bob@example.com', full_name='Bob Jones')


@pytest.fixture
def logged_in(client, alice):
    login(client)
    return client
