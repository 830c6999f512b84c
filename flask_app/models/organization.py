# flask_app/models/organization.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db


class Organization(BaseModel):
    """Organization profile owned by exactly one user account"""

    __tablename__ = "organizations"

    id = db.Column(db.Integer, primary_key=True)
    # One profile per owner; owners cannot be deleted while the profile exists
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    name = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    website = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    logo_url = db.Column(db.String(500), nullable=True)
    is_verified = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    owner = db.relationship("User", back_populates="organization")
    opportunities = db.relationship("VolunteerOpportunity", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.name}>"

    @staticmethod
    def find_by_owner(user_id):
        """Find the organization profile owned by a user"""
        try:
            return Organization.query.filter_by(user_id=user_id).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding organization for user {user_id}: {str(e)}")
            return None

    @staticmethod
    def find_by_id(org_id):
        """Find organization by ID with error handling"""
        try:
            return db.session.get(Organization, org_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding organization by id {org_id}: {str(e)}")
            return None
