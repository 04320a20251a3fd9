"""Shared fixtures for the attendance OTP tests."""
import threading

import pytest
from flask_jwt_extended import create_access_token

from attendance_otp import create_app, db
from attendance_otp.models import User, UserRole
from attendance_otp.services.seed_service import SeedService
from attendance_otp.utils.clock import FrozenClock

# 2023-11-14 10:00:12 UTC, 12 seconds into a 30 second step
START = 1699956012.0

# RFC 6238 SHA-1 test key "12345678901234567890" in base32
RFC_SECRET = 'GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ'


def seed_roster():
    """Demo instructors, students and classes plus an administrator."""
    SeedService.seed_all()
    admin = User(id='A0001', name='Registry Admin', role=UserRole.ADMIN)
    admin.set_password('admin123')
    admin.save()


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def app(clock):
    """Create test app."""
    app = create_app('testing', clock=clock)
    with app.app_context():
        db.create_all()
        seed_roster()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def file_app(tmp_path, clock):
    """App backed by a SQLite file so several threads share one database."""
    app = create_app('testing', clock=clock, config_overrides={
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'attendance.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 30}},
    })
    with app.app_context():
        db.create_all()
        seed_roster()
        db.session.remove()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def gateway(app):
    return app.extensions['attendance_gateway']


@pytest.fixture
def auth_headers(app):
    """Build Authorization headers for a user id."""
    def make(user_id):
        return {'Authorization': f'Bearer {create_access_token(identity=user_id)}'}
    return make


def run_concurrently(app, count, target):
    """Run target(index) in count threads released together, each in its own app context."""
    barrier = threading.Barrier(count)
    results = [None] * count
    errors = []

    def worker(index):
        with app.app_context():
            barrier.wait()
            try:
                results[index] = target(index)
            except Exception as exc:  # surfaced by the assertion below
                errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors, errors
    return results


@pytest.fixture
def concurrently():
    return run_concurrently
