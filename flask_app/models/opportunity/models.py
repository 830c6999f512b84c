# flask_app/models/opportunity/models.py

from flask import current_app
from sqlalchemy import Enum, Index
from sqlalchemy.exc import SQLAlchemyError

from ..base import BaseModel, db
from .enums import ApplicationStatus, OpportunityStatus


class VolunteerOpportunity(BaseModel):
    """A volunteer engagement posted by an organization"""

    __tablename__ = "volunteer_opportunities"

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(300), nullable=True)
    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    duration_hours = db.Column(db.Integer, nullable=True)
    required_skills = db.Column(db.Text, nullable=True)

    # Capacity; enrolled <= required is checked when an application is approved
    volunteers_required = db.Column(db.Integer, default=1, nullable=False)
    volunteers_enrolled = db.Column(db.Integer, default=0, nullable=False)

    status = db.Column(
        Enum(OpportunityStatus, name="opportunity_status_enum"),
        default=OpportunityStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    # Relationships
    organization = db.relationship("Organization", back_populates="opportunities")
    applications = db.relationship("VolunteerApplication", back_populates="opportunity")

    __table_args__ = (Index("idx_opportunity_org_status", "organization_id", "status"),)

    def __repr__(self):
        return f"<VolunteerOpportunity {self.title} ({self.status.value})>"

    @property
    def has_capacity(self):
        return self.volunteers_enrolled < self.volunteers_required

    @property
    def is_open(self):
        return self.status == OpportunityStatus.ACTIVE

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "durationHours": self.duration_hours,
            "volunteersRequired": self.volunteers_required,
            "volunteersEnrolled": self.volunteers_enrolled,
            "status": self.status.value,
            "organizationId": self.organization_id,
            "organizationName": self.organization.name if self.organization else None,
        }

    @staticmethod
    def find_by_id(opportunity_id):
        """Find opportunity by ID with error handling"""
        try:
            return db.session.get(VolunteerOpportunity, opportunity_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding opportunity by id {opportunity_id}: {str(e)}")
            return None


class VolunteerApplication(BaseModel):
    """A volunteer's request to take part in an opportunity"""

    __tablename__ = "volunteer_applications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    opportunity_id = db.Column(
        db.Integer, db.ForeignKey("volunteer_opportunities.id"), nullable=False, index=True
    )
    status = db.Column(
        Enum(ApplicationStatus, name="application_status_enum"),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True,
    )
    message = db.Column(db.Text, nullable=True)
    organization_notes = db.Column(db.Text, nullable=True)
    applied_at = db.Column(db.DateTime(timezone=True), nullable=False)
    responded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Relationships
    user = db.relationship("User")
    opportunity = db.relationship("VolunteerOpportunity", back_populates="applications")

    __table_args__ = (
        db.UniqueConstraint("user_id", "opportunity_id", name="_user_opportunity_uc"),
        Index("idx_application_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<VolunteerApplication user={self.user_id} opportunity={self.opportunity_id} ({self.status.value})>"

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "opportunityId": self.opportunity_id,
            "opportunityTitle": self.opportunity.title if self.opportunity else None,
            "status": self.status.value,
            "message": self.message,
            "organizationNotes": self.organization_notes,
            "appliedAt": self.applied_at.isoformat() if self.applied_at else None,
            "respondedAt": self.responded_at.isoformat() if self.responded_at else None,
        }
