"""Attendance API endpoints: instructor code display and student submission."""
from flask import Blueprint, current_app, g, request
from flask_jwt_extended import jwt_required
from attendance_otp import limiter
from attendance_otp.errors import InvalidCode, NoActiveSession, Unauthorized
from attendance_otp.services import get_gateway
from attendance_otp.services.qr_service import QRService
from attendance_otp.utils.decorators import instructor_required, login_required_user, student_required
from attendance_otp.utils.helpers import client_address, error_response, rate_limit_key, success_response
from attendance_otp.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


@attendance_bp.route('/sessions/<class_id>/code', methods=['POST'])
@jwt_required()
@instructor_required
@limiter.limit("120 per minute", key_func=rate_limit_key)
def request_code(class_id):
    """Open or refresh the attendance window and return the current code.

    Safe to poll from the instructor's display: while a session is live the
    same secret keeps producing the rotating code series.
    """
    data = request.get_json(silent=True) or {}

    grant = get_gateway().request_code(class_id, g.current_user, issuer_address=client_address())

    payload = grant.to_dict()
    if data.get('include_qr'):
        payload['qr_image'] = QRService.render_code_qr(class_id, grant.code)

    return success_response(
        data=payload,
        message="Attendance session opened" if grant.created else "Attendance code refreshed"
    )


@attendance_bp.route('/sessions/<class_id>', methods=['GET'])
@jwt_required()
@instructor_required
def session_status(class_id):
    """Whether a window is open for the class. Never exposes the secret."""
    return success_response(data=get_gateway().session_status(class_id, g.current_user))


@attendance_bp.route('/sessions/<class_id>', methods=['DELETE'])
@jwt_required()
@instructor_required
def close_session(class_id):
    """End the attendance window early."""
    closed = get_gateway().close_session(class_id, g.current_user)
    if not closed:
        return error_response("No active attendance session for this class", 404)
    return success_response(message="Attendance session closed")


@attendance_bp.route('/submit', methods=['POST'])
@jwt_required()
@student_required
@limiter.limit("20 per minute", key_func=rate_limit_key)
def submit_code():
    """Student submits the displayed code to be marked present."""
    data = Validator.require(request.get_json(silent=True), ['class_id', 'code'])
    student = g.current_user

    claimed_id = data.get('student_id')
    if claimed_id is not None and str(claimed_id) != student.id:
        raise Unauthorized("Cannot submit attendance for another student")

    latitude = Validator.parse_coordinate(data.get('latitude'), 'latitude', 90)
    longitude = Validator.parse_coordinate(data.get('longitude'), 'longitude', 180)

    try:
        result = get_gateway().submit_code(
            str(data['class_id']),
            student.id,
            str(data['code']),
            latitude=latitude,
            longitude=longitude
        )
    except (NoActiveSession, InvalidCode) as e:
        return error_response(e.message, e.status_code, accepted=False, reason=e.reason)

    return success_response(
        data={
            'accepted': result.accepted,
            'first_mark': result.first_mark,
            'day': result.day.isoformat()
        },
        message="Attendance marked successfully" if result.first_mark else "Attendance already marked"
    )


@attendance_bp.route('/bulk-mark', methods=['POST'])
@jwt_required()
@instructor_required
def bulk_mark():
    """Manually mark a list of students present."""
    data = Validator.require(request.get_json(silent=True), ['class_id', 'student_ids'])
    student_ids = Validator.parse_id_list(data['student_ids'], 'student_ids')
    day = Validator.parse_day(data.get('day'))

    counts = get_gateway().bulk_mark(str(data['class_id']), g.current_user, student_ids, day=day)

    current_app.logger.info("Bulk attendance saved for %s", data['class_id'])
    return success_response(data=counts, message="Bulk attendance saved")


@attendance_bp.route('/students/<student_id>/today', methods=['GET'])
@jwt_required()
@login_required_user
@limiter.limit("60 per minute", key_func=rate_limit_key)
def today_for_student(student_id):
    """Class ids the student has been marked present for today."""
    user = g.current_user
    if user.id != student_id and not user.is_instructor():
        raise Unauthorized("Cannot view another student's attendance")

    gateway = get_gateway()
    return success_response(data={
        'day': gateway.today().isoformat(),
        'present_class_ids': gateway.present_class_ids(student_id)
    })
