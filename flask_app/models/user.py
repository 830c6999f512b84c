# flask_app/models/user.py

from flask import current_app
from flask_login import UserMixin
from sqlalchemy import Enum, Index
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .base import BaseModel, db
from .enums import UserRole, UserStatus


class User(UserMixin, BaseModel):
    """Platform account: volunteers, organization owners and administrators"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(
        Enum(UserRole, name="user_role_enum"),
        default=UserRole.VOLUNTEER,
        nullable=False,
        index=True,
    )
    status = db.Column(
        Enum(UserStatus, name="user_status_enum"),
        default=UserStatus.ACTIVE,
        nullable=False,
    )
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    # Relationships
    organization = db.relationship("Organization", back_populates="owner", uselist=False)

    __table_args__ = (Index("idx_user_role_status", "role", "status"),)

    def __repr__(self):
        return f"<User {self.email} ({self.role.name})>"

    @property
    def is_active(self):
        """Flask-Login hook; inactive accounts cannot authenticate."""
        return self.status == UserStatus.ACTIVE

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self):
        return self.role == UserRole.ADMINISTRATOR

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_summary(self):
        """Compact representation used inside conversation payloads"""
        return {"id": self.id, "name": self.full_name, "role": self.role.name.lower()}

    @staticmethod
    def find_by_email(email):
        """Find user by email with error handling"""
        try:
            return User.query.filter_by(email=email.strip().lower()).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by email {email}: {str(e)}")
            return None

    @staticmethod
    def find_by_id(user_id):
        """Find user by ID with error handling"""
        try:
            return db.session.get(User, user_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by id {user_id}: {str(e)}")
            return None
