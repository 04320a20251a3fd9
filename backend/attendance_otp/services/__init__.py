"""Service wiring for the attendance subsystem."""
from flask import Flask, current_app

from attendance_otp.services.attendance_gateway import AttendanceGateway
from attendance_otp.services.attendance_ledger import AttendanceLedger
from attendance_otp.services.code_deriver import CodeDeriver
from attendance_otp.services.secret_generator import SecretGenerator
from attendance_otp.services.session_store import SessionStore
from attendance_otp.utils.clock import Clock

EXTENSION_KEY = 'attendance_gateway'


def init_app(app: Flask, clock: Clock = None) -> AttendanceGateway:
    """Build the attendance services from app config and attach them to app."""
    clock = clock or Clock()
    deriver = CodeDeriver(
        clock,
        step_seconds=app.config['OTP_STEP_SECONDS'],
        digits=app.config['OTP_DIGITS'],
        valid_window=app.config['OTP_VALID_WINDOW']
    )
    store = SessionStore(
        deriver,
        SecretGenerator(app.config['OTP_SECRET_BYTES']),
        clock,
        lifetime=app.config['ATTENDANCE_SESSION_LIFETIME']
    )
    gateway = AttendanceGateway(
        store,
        AttendanceLedger(clock),
        deriver,
        clock,
        timezone=app.config['ATTENDANCE_TIMEZONE']
    )
    app.extensions[EXTENSION_KEY] = gateway
    return gateway


def get_gateway() -> AttendanceGateway:
    """Gateway bound to the current application."""
    return current_app.extensions[EXTENSION_KEY]
