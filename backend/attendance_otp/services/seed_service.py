"""Database seeding service for demo data."""
import logging

from attendance_otp import db
from attendance_otp.models.course_class import CourseClass
from attendance_otp.models.user import User, UserRole

logger = logging.getLogger(__name__)

INSTRUCTORS = [
    ('L1001', 'Dr. Amina Rahman', 'amina.rahman@university.edu'),
    ('L1002', 'Dr. Joseph Okello', 'joseph.okello@university.edu'),
]

STUDENTS = [
    ('240101', 'Grace Nanyonga', 'NCSC', 2),
    ('240102', 'Peter Mugisha', 'NCSC', 2),
    ('240103', 'Sarah Achieng', 'NCSC', 2),
    ('250101', 'Daniel Ssemakula', 'NCSC', 1),
]

CLASSES = [
    ('NCSC211', 'NCSC211', 'Data Structures and Algorithms', 'NCSC', 2, 'L1001'),
    ('NCSC213', 'NCSC213', 'Computer Networks', 'NCSC', 2, 'L1002'),
    ('NCSC111', 'NCSC111', 'Introduction to Programming', 'NCSC', 1, 'L1001'),
]


class SeedService:
    """Service to seed database with demo data."""

    DEFAULT_PASSWORD = 'password123'

    @staticmethod
    def seed_all():
        """Seed all demo data."""
        SeedService.seed_users()
        SeedService.seed_classes()

    @staticmethod
    def seed_users():
        """Seed instructors and students, skipping ids that exist."""
        created = 0
        for user_id, name, email in INSTRUCTORS:
            created += SeedService._add_user(user_id, name, UserRole.INSTRUCTOR, email=email)
        for user_id, name, program, year in STUDENTS:
            created += SeedService._add_user(user_id, name, UserRole.STUDENT, program=program, year=year)

        db.session.commit()
        logger.info("Seeded %d users", created)

    @staticmethod
    def seed_classes():
        """Seed class offerings."""
        created = 0
        for class_id, course_code, name, program, year, instructor_id in CLASSES:
            if db.session.get(CourseClass, class_id) is not None:
                continue
            db.session.add(CourseClass(
                id=class_id,
                course_code=course_code,
                name=name,
                program=program,
                year=year,
                instructor_id=instructor_id
            ))
            created += 1

        db.session.commit()
        logger.info("Seeded %d classes", created)

    @staticmethod
    def _add_user(user_id, name, role, **fields) -> int:
        if db.session.get(User, user_id) is not None:
            return 0
        user = User(id=user_id, name=name, role=role, **fields)
        user.set_password(SeedService.DEFAULT_PASSWORD)
        db.session.add(user)
        return 1
