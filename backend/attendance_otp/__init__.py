"""Attendance OTP Service - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = None, clock=None, config_overrides: dict = None) -> Flask:
    """Application factory pattern.

    ``clock`` replaces the wall clock used by the attendance services and
    ``config_overrides`` is applied on top of the selected config class.
    """
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    app.config.from_object(get_config(config_name))
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Attendance services
    from attendance_otp import services
    services.init_app(app, clock)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Make models known to SQLAlchemy metadata
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Attendance OTP Service',
            'version': '1.0.0'
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendance_otp.api.auth import auth_bp
    from attendance_otp.api.attendance import attendance_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendance_otp.errors import AttendanceError
    from attendance_otp.utils.helpers import handle_error, error_response
    from attendance_otp.utils.validators import ValidationError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AttendanceError)
    def attendance_error(error):
        return error_response(error.message, error.status_code, reason=error.reason)

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return handle_error(error, 400)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error("Unhandled error: %s", getattr(error, 'original_exception', error))
        return handle_error("Internal server error", 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('Attendance OTP Service startup')


def setup_database(app: Flask) -> None:
    """Import all models so metadata is complete."""
    with app.app_context():
        from attendance_otp.models import (  # noqa: F401
            User, UserRole, CourseClass, AttendanceSession, AttendanceMark
        )


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with demo users and classes."""
        from attendance_otp.services.seed_service import SeedService

        SeedService.seed_all()
        click.echo('Database seeded successfully!')

    @app.cli.command('create-user')
    @click.option('--role', type=click.Choice(['student', 'instructor', 'admin']), default='student')
    def create_user(role):
        """Create a user account."""
        from attendance_otp.services.auth_service import AuthService

        user_id = click.prompt('University ID')
        name = click.prompt('Full name')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        user, error = AuthService.create_user(user_id, name, password, role=role)
        if error:
            raise click.ClickException(error)
        click.echo(f'{role.title()} created: {user.id}')
