# flask_app/routes/voluntariado.py

"""
Opportunity and application API routes
"""

from flask_login import current_user, login_required

from flask_app.models import ApplicationStatus
from flask_app.services.application_service import ApplicationService
from flask_app.utils.api import (
    api_response,
    get_json_body,
    optional_datetime,
    optional_int,
    optional_str,
    require_int,
    require_str,
)
from flask_app.utils.errors import ValidationFailed
from flask_app.utils.permissions import (
    get_role_claim,
    organization_only,
    organization_or_admin,
    volunteer_only,
    volunteer_or_admin,
)


def register_voluntariado_routes(app):
    """Register opportunity and application routes"""

    @app.route("/api/voluntariado/opportunities", methods=["GET"])
    @login_required
    def api_list_opportunities():
        opportunities = ApplicationService.list_open_opportunities()
        return api_response([o.to_dict() for o in opportunities])

    @app.route("/api/voluntariado/opportunities", methods=["POST"])
    @organization_only
    def api_create_opportunity():
        data = get_json_body()
        opportunity = ApplicationService.create_opportunity(
            current_user.id,
            title=require_str(data, "title", max_length=200),
            volunteers_required=require_int(data, "volunteersRequired", maximum=500),
            description=optional_str(data, "description", max_length=2000),
            location=optional_str(data, "location", max_length=300),
            start_date=optional_datetime(data, "startDate"),
            end_date=optional_datetime(data, "endDate"),
            duration_hours=optional_int(data, "durationHours", maximum=1000),
        )
        return api_response(opportunity.to_dict(), message="Opportunity created", status=201)

    @app.route("/api/voluntariado/applications", methods=["GET"])
    @organization_only
    def api_organization_applications():
        payload = []
        for application in ApplicationService.list_for_organization(current_user.id):
            entry = application.to_dict()
            entry["applicant"] = dict(application.user.to_summary(), email=application.user.email)
            payload.append(entry)
        return api_response(payload)

    @app.route("/api/voluntariado/apply", methods=["POST"])
    @volunteer_only
    def api_apply():
        data = get_json_body()
        opportunity_id = require_int(data, "opportunityId")
        message = optional_str(data, "message", max_length=1000)

        application = ApplicationService.apply(current_user.id, opportunity_id, message)
        return api_response(application.to_dict(), message="Application submitted", status=201)

    @app.route("/api/voluntariado/my-applications", methods=["GET"])
    @volunteer_or_admin
    def api_my_applications():
        applications = ApplicationService.list_for_user(current_user.id)
        return api_response([a.to_dict() for a in applications])

    @app.route("/api/voluntariado/application-status", methods=["PUT"])
    @organization_or_admin
    def api_update_application_status():
        data = get_json_body()
        application_id = require_int(data, "applicationId")
        status = ApplicationStatus.parse(data.get("status"))
        if status is None:
            raise ValidationFailed(
                "status must be one of: " + ", ".join(s.value for s in ApplicationStatus),
                errors=[{"field": "status", "error": "invalid"}],
            )
        notes = optional_str(data, "notes", max_length=2000)

        application, awarded = ApplicationService.update_status(
            application_id,
            status,
            notes,
            actor_id=current_user.id,
            actor_role=get_role_claim(),
        )
        payload = application.to_dict()
        payload["badgesAwarded"] = [ub.badge.name for ub in awarded]
        return api_response(payload, message="Application status updated")
