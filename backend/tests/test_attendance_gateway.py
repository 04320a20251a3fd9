"""Tests for the attendance gateway orchestration."""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from attendance_otp import db
from attendance_otp.errors import (
    ClassNotFound, InvalidCode, NoActiveSession, StorageUnavailable,
    StudentNotFound, Unauthorized
)
from attendance_otp.models import AttendanceMark, User
from attendance_otp.services.attendance_ledger import MarkOutcome

from conftest import RFC_SECRET

TODAY = date(2023, 11, 14)

# base32 of "abcdefghijklmnopqrst"
OTHER_SECRET = 'MFRGGZDFMZTWQ2LKNNWG23TPOBYXE43U'


@pytest.fixture
def fixed_secrets(gateway, monkeypatch):
    """Hand out known secrets to the sessions opened next, in order."""
    def use(*secrets):
        monkeypatch.setattr(gateway.session_store.secret_generator, 'generate', iter(secrets).__next__)
    return use


def codes_in_window(gateway, secret):
    step = gateway.deriver.step_index()
    return {gateway.deriver.derive(secret, step + offset) for offset in (-1, 0, 1)}


def user(user_id):
    return db.session.get(User, user_id)


def open_code(gateway, class_id='NCSC211', instructor='L1001'):
    return gateway.request_code(class_id, user(instructor), issuer_address='10.0.0.5')


def test_request_code_returns_current_code(gateway):
    grant = open_code(gateway)

    assert grant.created
    assert len(grant.code) == 6 and grant.code.isdigit()
    assert grant.expires_in_ms == 18000
    assert grant.to_dict()['session_expires_at'] == '2023-11-14T12:00:12'


def test_request_code_is_idempotent_while_live(gateway):
    first = open_code(gateway)
    second = open_code(gateway)

    assert not second.created
    assert second.session_id == first.session_id
    assert second.code == first.code


def test_request_code_requires_class_instructor(gateway):
    with pytest.raises(Unauthorized):
        open_code(gateway, instructor='L1002')
    with pytest.raises(Unauthorized):
        open_code(gateway, instructor='240101')


def test_admin_may_open_any_class(gateway):
    assert open_code(gateway, class_id='NCSC213', instructor='A0001').created


def test_request_code_for_unknown_class(gateway):
    with pytest.raises(ClassNotFound):
        open_code(gateway, class_id='NOPE101')


def test_submit_without_session(gateway):
    with pytest.raises(NoActiveSession):
        gateway.submit_code('NCSC211', '240101', '123456')


def test_submit_invalid_code(gateway):
    grant = open_code(gateway)
    wrong = '%06d' % ((int(grant.code) + 1) % 1000000)

    with pytest.raises(InvalidCode):
        gateway.submit_code('NCSC211', '240101', wrong)
    assert AttendanceMark.query.count() == 0


def test_submit_valid_code_marks_once(gateway):
    grant = open_code(gateway)

    first = gateway.submit_code('NCSC211', '240101', grant.code, latitude=0.33, longitude=32.57)
    again = gateway.submit_code('NCSC211', '240101', grant.code)

    assert first.accepted and first.first_mark
    assert first.outcome is MarkOutcome.CREATED
    assert first.day == TODAY
    assert again.accepted and not again.first_mark
    assert again.outcome is MarkOutcome.ALREADY_MARKED

    mark = AttendanceMark.query.one()
    assert mark.session_id == grant.session_id
    assert mark.latitude == 0.33


def test_code_survives_one_step_of_skew(gateway, clock):
    grant = open_code(gateway)

    clock.advance(30)
    assert gateway.submit_code('NCSC211', '240101', grant.code).accepted

    clock.advance(30)
    with pytest.raises(InvalidCode):
        gateway.submit_code('NCSC211', '240102', grant.code)


def test_code_from_another_class_is_rejected(gateway, fixed_secrets):
    fixed_secrets(RFC_SECRET, OTHER_SECRET)
    open_code(gateway)
    other = open_code(gateway, class_id='NCSC213', instructor='L1002')

    assert other.code not in codes_in_window(gateway, RFC_SECRET)
    with pytest.raises(InvalidCode):
        gateway.submit_code('NCSC211', '240101', other.code)


def test_submit_requires_known_student(gateway):
    grant = open_code(gateway)

    with pytest.raises(StudentNotFound):
        gateway.submit_code('NCSC211', '999999', grant.code)
    with pytest.raises(Unauthorized):
        gateway.submit_code('NCSC211', 'L1001', grant.code)


def test_first_mark_listeners_run_once(gateway):
    calls = []
    gateway.on_first_mark(lambda student_id, class_id, day: calls.append((student_id, class_id, day)))
    grant = open_code(gateway)

    gateway.submit_code('NCSC211', '240101', grant.code)
    gateway.submit_code('NCSC211', '240101', grant.code)

    assert calls == [('240101', 'NCSC211', TODAY)]


def test_failing_listener_does_not_reject(gateway):
    def broken(student_id, class_id, day):
        raise RuntimeError('notification service down')

    gateway.on_first_mark(broken)
    grant = open_code(gateway)

    assert gateway.submit_code('NCSC211', '240101', grant.code).first_mark
    assert AttendanceMark.query.count() == 1


def test_storage_failure_is_opaque(gateway, monkeypatch):
    grant = open_code(gateway)

    def failing_mark(*args, **kwargs):
        raise OperationalError('INSERT INTO attendance_marks', {}, Exception('disk I/O error'))

    monkeypatch.setattr(gateway.ledger, 'mark_present', failing_mark)

    with pytest.raises(StorageUnavailable):
        gateway.submit_code('NCSC211', '240101', grant.code)


def test_unrelated_integrity_error_is_storage_unavailable(gateway, monkeypatch):
    grant = open_code(gateway)

    def failing_insert(*args, **kwargs):
        raise IntegrityError('INSERT INTO attendance_marks', {}, Exception('FOREIGN KEY constraint failed'))

    monkeypatch.setattr(type(db.session), 'execute', failing_insert)

    with pytest.raises(StorageUnavailable):
        gateway.submit_code('NCSC211', '240101', grant.code)
    monkeypatch.undo()
    assert AttendanceMark.query.count() == 0


def test_close_session(gateway):
    grant = open_code(gateway)

    assert gateway.close_session('NCSC211', user('L1001'))
    with pytest.raises(NoActiveSession):
        gateway.submit_code('NCSC211', '240101', grant.code)
    with pytest.raises(Unauthorized):
        gateway.close_session('NCSC211', user('L1002'))


def test_session_status(gateway):
    assert gateway.session_status('NCSC211', user('L1001')) == {'class_id': 'NCSC211', 'active': False}

    open_code(gateway)
    status = gateway.session_status('NCSC211', user('L1001'))
    assert status['active'] is True
    assert status['expires_at'] == '2023-11-14T12:00:12'
    assert 'secret' not in status


def test_bulk_mark(gateway):
    grant = open_code(gateway)
    gateway.submit_code('NCSC211', '240101', grant.code)

    counts = gateway.bulk_mark('NCSC211', user('L1001'), ['240101', '240102'])

    assert counts == {'created': 1, 'already_marked': 1}
    assert gateway.present_class_ids('240102') == ['NCSC211']


def test_bulk_mark_rejects_unknown_students(gateway):
    with pytest.raises(StudentNotFound):
        gateway.bulk_mark('NCSC211', user('L1001'), ['240101', '999999'])
    with pytest.raises(StudentNotFound):
        gateway.bulk_mark('NCSC211', user('L1001'), ['L1002'])
    assert AttendanceMark.query.count() == 0


def test_bulk_mark_for_past_day(gateway):
    counts = gateway.bulk_mark('NCSC211', user('L1001'), ['240103'], day=date(2023, 11, 7))

    assert counts == {'created': 1, 'already_marked': 0}
    assert gateway.present_class_ids('240103') == []
    assert gateway.present_class_ids('240103', date(2023, 11, 7)) == ['NCSC211']


def test_end_to_end_scenario(gateway, clock, fixed_secrets):
    fixed_secrets(RFC_SECRET)
    grant = open_code(gateway)
    issued_code = grant.code

    assert gateway.submit_code('NCSC211', '240101', issued_code).first_mark

    repeat = gateway.submit_code('NCSC211', '240101', issued_code)
    assert repeat.accepted and not repeat.first_mark
    assert AttendanceMark.query.filter_by(student_id='240101').count() == 1

    assert '000000' not in codes_in_window(gateway, RFC_SECRET)
    with pytest.raises(InvalidCode):
        gateway.submit_code('NCSC211', '240102', '000000')

    clock.advance(hours=2, seconds=1)
    with pytest.raises(NoActiveSession):
        gateway.submit_code('NCSC211', '240103', issued_code)

    assert AttendanceMark.query.count() == 1
