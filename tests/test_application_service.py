from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from flask_app.models import (
    ApplicationStatus,
    Notification,
    NotificationType,
    OpportunityStatus,
    UserBadge,
    UserRole,
    VolunteerApplication,
    VolunteerOpportunity,
    db,
)
from flask_app.services.application_service import ApplicationService
from flask_app.services.badge_service import BadgeService
from flask_app.utils.errors import Conflict, NotFound, ValidationFailed


def _update(application, status, actor, role, notes=None):
    return ApplicationService.update_status(application.id, status, notes, actor_id=actor.id, actor_role=role)


class TestApply:
    """Test ApplicationService.apply"""

    def test_creates_pending_application(self, volunteer, opportunity):
        application = ApplicationService.apply(volunteer.id, opportunity.id, "I'd love to help")
        stored = db.session.get(VolunteerApplication, application.id)
        assert stored.status == ApplicationStatus.PENDING
        assert stored.message == "I'd love to help"
        assert stored.applied_at is not None

    def test_notifies_organization_owner(self, volunteer, opportunity, org_user):
        ApplicationService.apply(volunteer.id, opportunity.id)
        notification = Notification.query.filter_by(recipient_id=org_user.id).one()
        assert notification.type == NotificationType.APPLICATION_SUBMITTED

    def test_duplicate_application_conflicts(self, volunteer, opportunity):
        ApplicationService.apply(volunteer.id, opportunity.id)
        with pytest.raises(Conflict):
            ApplicationService.apply(volunteer.id, opportunity.id, "again")
        assert VolunteerApplication.query.filter_by(user_id=volunteer.id).count() == 1

    def test_unknown_opportunity(self, volunteer):
        with pytest.raises(NotFound):
            ApplicationService.apply(volunteer.id, 999)

    def test_closed_opportunity_conflicts(self, volunteer, make_opportunity):
        closed = make_opportunity(title="Closed", status=OpportunityStatus.CLOSED)
        with pytest.raises(Conflict):
            ApplicationService.apply(volunteer.id, closed.id)

    def test_list_for_user(self, volunteer, other_volunteer, opportunity, make_opportunity):
        second = make_opportunity(title="Second")
        ApplicationService.apply(volunteer.id, opportunity.id)
        ApplicationService.apply(volunteer.id, second.id)
        ApplicationService.apply(other_volunteer.id, opportunity.id)
        titles = [a.opportunity.title for a in ApplicationService.list_for_user(volunteer.id)]
        assert titles == ["Second", "Beach Cleanup"]

    def test_list_open_opportunities(self, opportunity, make_opportunity):
        make_opportunity(title="Paused", status=OpportunityStatus.PAUSED)
        assert [o.title for o in ApplicationService.list_open_opportunities()] == ["Beach Cleanup"]


class TestOrganizationSide:
    """Test opportunity publishing and the received-applications list"""

    def test_create_opportunity(self, org_user, organization):
        start = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
        opportunity = ApplicationService.create_opportunity(
            org_user.id,
            title="Food Bank Shift",
            volunteers_required=4,
            location="Santo Domingo",
            start_date=start,
            end_date=start + timedelta(hours=3),
            duration_hours=3,
        )
        stored = db.session.get(VolunteerOpportunity, opportunity.id)
        assert stored.organization_id == organization.id
        assert stored.status == OpportunityStatus.ACTIVE
        assert stored.volunteers_enrolled == 0
        assert [o.title for o in ApplicationService.list_open_opportunities()] == ["Food Bank Shift"]

    def test_create_opportunity_rejects_inverted_dates(self, org_user, organization):
        start = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
        with pytest.raises(ValidationFailed):
            ApplicationService.create_opportunity(
                org_user.id, title="Backwards", volunteers_required=1, start_date=start, end_date=start - timedelta(days=1)
            )
        assert VolunteerOpportunity.query.count() == 0

    def test_create_opportunity_requires_profile(self, org_user):
        """Test an organization account without a profile cannot publish"""
        with pytest.raises(NotFound):
            ApplicationService.create_opportunity(org_user.id, title="Orphan", volunteers_required=1)

    def test_list_for_organization(self, volunteer, other_volunteer, org_user, opportunity, other_organization):
        foreign = VolunteerOpportunity(
            organization_id=other_organization.id, title="Elsewhere", volunteers_required=2, volunteers_enrolled=0
        )
        db.session.add(foreign)
        db.session.commit()
        first = ApplicationService.apply(volunteer.id, opportunity.id)
        second = ApplicationService.apply(other_volunteer.id, opportunity.id)
        ApplicationService.apply(volunteer.id, foreign.id)

        received = ApplicationService.list_for_organization(org_user.id)
        assert [a.id for a in received] == [second.id, first.id]
        foreign_received = ApplicationService.list_for_organization(other_organization.user_id)
        assert [a.opportunity_id for a in foreign_received] == [foreign.id]

    def test_list_for_organization_requires_profile(self, volunteer):
        with pytest.raises(NotFound):
            ApplicationService.list_for_organization(volunteer.id)


class TestUpdateStatus:
    """Test ApplicationService.update_status"""

    @pytest.fixture
    def application(self, volunteer, opportunity):
        return ApplicationService.apply(volunteer.id, opportunity.id)

    def test_owner_approves_and_enrolls(self, application, org_user, organization):
        updated, awarded = _update(application, ApplicationStatus.APPROVED, org_user, UserRole.ORGANIZATION, "Welcome")
        assert updated.status == ApplicationStatus.APPROVED
        assert updated.organization_notes == "Welcome"
        assert updated.responded_at is not None
        assert awarded == []
        assert updated.opportunity.volunteers_enrolled == 1

    def test_approve_and_reject_notify_nobody(self, application, volunteer, org_user, organization):
        """Test only completion has a side effect; approval and rejection create no notifications"""
        _update(application, ApplicationStatus.APPROVED, org_user, UserRole.ORGANIZATION)
        _update(application, ApplicationStatus.REJECTED, org_user, UserRole.ORGANIZATION)
        assert Notification.query.filter_by(recipient_id=volunteer.id).count() == 0
        assert (
            Notification.query.filter(
                Notification.type.in_([NotificationType.APPLICATION_APPROVED, NotificationType.APPLICATION_REJECTED])
            ).count()
            == 0
        )

    def test_approval_respects_capacity(self, volunteer, other_volunteer, make_opportunity, org_user, organization):
        small = make_opportunity(title="Small", volunteers_required=1)
        first = ApplicationService.apply(volunteer.id, small.id)
        second = ApplicationService.apply(other_volunteer.id, small.id)

        _update(first, ApplicationStatus.APPROVED, org_user, UserRole.ORGANIZATION)
        with pytest.raises(Conflict):
            _update(second, ApplicationStatus.APPROVED, org_user, UserRole.ORGANIZATION)

        db.session.rollback()
        assert db.session.get(VolunteerOpportunity, small.id).volunteers_enrolled == 1
        assert db.session.get(VolunteerApplication, second.id).status == ApplicationStatus.PENDING

    def test_rejecting_approved_releases_seat(self, application, org_user, organization):
        _update(application, ApplicationStatus.APPROVED, org_user, UserRole.ORGANIZATION)
        updated, _ = _update(application, ApplicationStatus.REJECTED, org_user, UserRole.ORGANIZATION)
        assert updated.opportunity.volunteers_enrolled == 0

    def test_other_organization_cannot_update(self, application, other_organization):
        with pytest.raises(NotFound):
            ApplicationService.update_status(
                application.id,
                ApplicationStatus.APPROVED,
                None,
                actor_id=other_organization.user_id,
                actor_role=UserRole.ORGANIZATION,
            )

    def test_admin_can_update_any(self, application, admin_user):
        updated, _ = _update(application, ApplicationStatus.REJECTED, admin_user, UserRole.ADMINISTRATOR)
        assert updated.status == ApplicationStatus.REJECTED

    def test_unknown_application(self, admin_user):
        with pytest.raises(NotFound):
            ApplicationService.update_status(
                999, ApplicationStatus.APPROVED, None, actor_id=admin_user.id, actor_role=UserRole.ADMINISTRATOR
            )

    @pytest.mark.parametrize(
        "start,target",
        [
            (ApplicationStatus.REJECTED, ApplicationStatus.APPROVED),
            (ApplicationStatus.REJECTED, ApplicationStatus.COMPLETED),
            (ApplicationStatus.COMPLETED, ApplicationStatus.PENDING),
            (ApplicationStatus.APPROVED, ApplicationStatus.PENDING),
        ],
    )
    def test_invalid_transitions(self, application, admin_user, start, target):
        application.status = start
        db.session.commit()
        with pytest.raises(Conflict):
            _update(application, target, admin_user, UserRole.ADMINISTRATOR)

    def test_same_status_only_updates_notes(self, application, admin_user):
        _update(application, ApplicationStatus.APPROVED, admin_user, UserRole.ADMINISTRATOR)
        responded_at = db.session.get(VolunteerApplication, application.id).responded_at

        updated, _ = _update(application, ApplicationStatus.APPROVED, admin_user, UserRole.ADMINISTRATOR, "Bring gloves")
        assert updated.organization_notes == "Bring gloves"
        assert updated.responded_at == responded_at
        assert updated.opportunity.volunteers_enrolled == 1


class TestCompletionAwardsBadges:
    """Test the completion side effect"""

    @pytest.fixture
    def application(self, volunteer, opportunity):
        return ApplicationService.apply(volunteer.id, opportunity.id)

    def test_completion_awards_badge(self, application, admin_user, volunteer, badge_catalog):
        updated, awarded = _update(application, ApplicationStatus.COMPLETED, admin_user, UserRole.ADMINISTRATOR)
        assert updated.status == ApplicationStatus.COMPLETED
        assert [ub.badge.name for ub in awarded] == ["First Volunteer"]
        assert UserBadge.query.filter_by(user_id=volunteer.id).count() == 1

    def test_completing_twice_awards_once(self, application, admin_user, volunteer, badge_catalog):
        _update(application, ApplicationStatus.COMPLETED, admin_user, UserRole.ADMINISTRATOR)
        _, awarded = _update(application, ApplicationStatus.COMPLETED, admin_user, UserRole.ADMINISTRATOR)
        assert awarded == []
        assert UserBadge.query.filter_by(user_id=volunteer.id).count() == 1

    def test_other_transitions_do_not_evaluate(self, application, admin_user, badge_catalog):
        with patch.object(BadgeService, "evaluate_activity_badges") as evaluate:
            _update(application, ApplicationStatus.APPROVED, admin_user, UserRole.ADMINISTRATOR)
        evaluate.assert_not_called()

    def test_badge_failure_keeps_status_change(self, application, admin_user, volunteer, badge_catalog, caplog):
        """Test a storage error while awarding is logged and the status still commits"""
        failure = OperationalError("INSERT INTO user_badges", {}, Exception("database is locked"))
        with patch.object(BadgeService, "evaluate_activity_badges", side_effect=failure):
            updated, awarded = _update(application, ApplicationStatus.COMPLETED, admin_user, UserRole.ADMINISTRATOR)

        assert awarded == []
        db.session.expire_all()
        assert db.session.get(VolunteerApplication, application.id).status == ApplicationStatus.COMPLETED
        assert UserBadge.query.count() == 0
        assert "Badge evaluation failed" in caplog.text

        # Evaluation is idempotent, so a later re-run catches up
        assert [ub.badge.name for ub in BadgeService.check_automatic(volunteer.id)] == ["First Volunteer"]
