# flask_app/services/application_service.py
"""
Application Service - volunteer applications and their status workflow
"""

from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config.monitoring import ServiceMonitoring
from flask_app.models import (
    APPLICATION_TRANSITIONS,
    ApplicationStatus,
    NotificationType,
    OpportunityStatus,
    Organization,
    UserBadge,
    UserRole,
    VolunteerApplication,
    VolunteerOpportunity,
    db,
)
from flask_app.models.base import utcnow
from flask_app.services.badge_service import BadgeService
from flask_app.services.notification_service import NotificationService
from flask_app.utils.errors import Conflict, NotFound, ValidationFailed


class ApplicationService:
    """Apply to opportunities and move applications through their lifecycle"""

    @classmethod
    def list_open_opportunities(cls) -> List[VolunteerOpportunity]:
        return (
            VolunteerOpportunity.query.filter_by(status=OpportunityStatus.ACTIVE)
            .order_by(VolunteerOpportunity.start_date.asc(), VolunteerOpportunity.id.asc())
            .all()
        )

    @classmethod
    def list_for_user(cls, user_id: int) -> List[VolunteerApplication]:
        return (
            VolunteerApplication.query.filter_by(user_id=user_id)
            .order_by(VolunteerApplication.applied_at.desc(), VolunteerApplication.id.desc())
            .all()
        )

    @classmethod
    def _organization_for_owner(cls, owner_id: int) -> Organization:
        organization = Organization.find_by_owner(owner_id)
        if organization is None:
            raise NotFound("No organization profile for this account")
        return organization

    @classmethod
    def list_for_organization(cls, owner_id: int) -> List[VolunteerApplication]:
        """Applications received by the organization ``owner_id`` owns, newest first"""
        organization = cls._organization_for_owner(owner_id)
        return (
            VolunteerApplication.query.join(VolunteerApplication.opportunity)
            .filter(VolunteerOpportunity.organization_id == organization.id)
            .order_by(VolunteerApplication.applied_at.desc(), VolunteerApplication.id.desc())
            .all()
        )

    @classmethod
    def create_opportunity(
        cls,
        owner_id: int,
        title: str,
        volunteers_required: int,
        description: Optional[str] = None,
        location: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        duration_hours: Optional[int] = None,
    ) -> VolunteerOpportunity:
        """Publish an active opportunity for the caller's organization"""
        organization = cls._organization_for_owner(owner_id)
        if start_date and end_date and end_date < start_date:
            raise ValidationFailed(
                "endDate must not be before startDate",
                errors=[{"field": "endDate", "error": "range"}],
            )

        opportunity = VolunteerOpportunity(
            organization_id=organization.id,
            title=title,
            description=description,
            location=location,
            start_date=start_date,
            end_date=end_date,
            duration_hours=duration_hours,
            volunteers_required=volunteers_required,
            volunteers_enrolled=0,
            status=OpportunityStatus.ACTIVE,
        )
        db.session.add(opportunity)
        db.session.commit()

        current_app.logger.info(f"Organization {organization.id} published opportunity {opportunity.id}")
        return opportunity

    @classmethod
    def apply(cls, user_id: int, opportunity_id: int, message: Optional[str] = None) -> VolunteerApplication:
        """
        Create a pending application.

        Raises NotFound for an unknown opportunity and Conflict when it is not
        accepting applications or the user already applied.
        """
        opportunity = db.session.get(VolunteerOpportunity, opportunity_id)
        if opportunity is None:
            raise NotFound("Opportunity not found")
        if not opportunity.is_open:
            raise Conflict("This opportunity is not accepting applications")

        existing = VolunteerApplication.query.filter_by(user_id=user_id, opportunity_id=opportunity_id).first()
        if existing is not None:
            raise Conflict("You have already applied to this opportunity")

        application = VolunteerApplication(
            user_id=user_id,
            opportunity_id=opportunity_id,
            message=message,
            status=ApplicationStatus.PENDING,
            applied_at=utcnow(),
        )
        db.session.add(application)
        try:
            db.session.flush()
        except IntegrityError:
            # A concurrent request inserted the same (user, opportunity) pair
            db.session.rollback()
            raise Conflict("You have already applied to this opportunity")

        if opportunity.organization is not None:
            NotificationService.create(
                recipient_id=opportunity.organization.user_id,
                sender_id=user_id,
                title="New application",
                message=f"A volunteer applied to '{opportunity.title}'",
                type=NotificationType.APPLICATION_SUBMITTED,
                action_url=f"/opportunities/{opportunity.id}/applications",
                commit=False,
            )
        db.session.commit()

        current_app.logger.info(
            f"User {user_id} applied to opportunity {opportunity_id} (application {application.id})"
        )
        return application

    @classmethod
    def _load_for_actor(cls, application_id: int, actor_id: int, actor_role: UserRole) -> VolunteerApplication:
        application = db.session.get(VolunteerApplication, application_id)
        if application is None:
            raise NotFound("Application not found")
        if actor_role == UserRole.ADMINISTRATOR:
            return application

        organization = Organization.find_by_owner(actor_id)
        if organization is None or application.opportunity.organization_id != organization.id:
            # Indistinguishable from a missing application
            raise NotFound("Application not found")
        return application

    @classmethod
    def _evaluate_badges(cls, user_id: int) -> List[UserBadge]:
        """Run badge evaluation in a savepoint; a storage failure there leaves the status change intact"""
        try:
            with db.session.begin_nested():
                return BadgeService.evaluate_activity_badges(user_id)
        except SQLAlchemyError as e:
            current_app.logger.error(
                f"Badge evaluation failed for user {user_id}; status change kept: {str(e)}",
                exc_info=True,
            )
            return []

    @classmethod
    def update_status(
        cls,
        application_id: int,
        new_status: ApplicationStatus,
        notes: Optional[str],
        actor_id: int,
        actor_role: UserRole,
    ) -> Tuple[VolunteerApplication, List[UserBadge]]:
        """
        Change an application's status on behalf of its organization or an admin.

        Approval consumes one unit of the opportunity's capacity. Completion
        triggers activity badge evaluation for the volunteer inside the same
        transaction. Returns the application and any badges awarded.
        """
        application = cls._load_for_actor(application_id, actor_id, actor_role)
        current = application.status

        if new_status not in APPLICATION_TRANSITIONS[current]:
            raise Conflict(f"Cannot change application status from {current.value} to {new_status.value}")

        opportunity = application.opportunity
        if new_status == ApplicationStatus.APPROVED and current != ApplicationStatus.APPROVED:
            if not opportunity.has_capacity:
                raise Conflict("This opportunity has no remaining volunteer capacity")
            opportunity.volunteers_enrolled += 1
        elif current == ApplicationStatus.APPROVED and new_status == ApplicationStatus.REJECTED:
            opportunity.volunteers_enrolled = max(0, opportunity.volunteers_enrolled - 1)

        if notes is not None:
            application.organization_notes = notes
        if new_status != current:
            application.status = new_status
            application.responded_at = utcnow()

        # Emit the UPDATE before any savepoint is opened
        db.session.flush()

        awarded = []
        if new_status == ApplicationStatus.COMPLETED:
            awarded = cls._evaluate_badges(application.user_id)

        db.session.commit()

        ServiceMonitoring.APPLICATION_STATUS_CHANGES.labels(status=new_status.value).inc()
        current_app.logger.info(
            f"Application {application.id} status {current.value} -> {new_status.value} "
            f"by user {actor_id}; {len(awarded)} badges awarded"
        )
        return application, awarded
