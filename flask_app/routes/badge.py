# flask_app/routes/badge.py

"""
Badge API routes
"""

from flask_login import current_user, login_required

from flask_app.services.badge_service import BadgeService
from flask_app.utils.api import api_response, get_json_body, require_int
from flask_app.utils.permissions import admin_only


def register_badge_routes(app):
    """Register badge routes"""

    @app.route("/api/badge", methods=["GET"])
    @login_required
    def api_badge_catalog():
        return api_response([b.to_dict() for b in BadgeService.list_catalog()])

    @app.route("/api/badge/my-badges", methods=["GET"])
    @login_required
    def api_my_badges():
        return api_response(BadgeService.user_badges(current_user.id))

    @app.route("/api/badge/stats", methods=["GET"])
    @login_required
    def api_badge_stats():
        return api_response(BadgeService.stats(current_user.id).to_dict())

    @app.route("/api/badge/check-automatic", methods=["POST"])
    @login_required
    def api_check_automatic_badges():
        awarded = BadgeService.check_automatic(current_user.id)
        return api_response(
            {"awarded": [ub.badge.name for ub in awarded]},
            message=f"{len(awarded)} new badges awarded" if awarded else "No new badges",
        )

    @app.route("/api/badge/award", methods=["POST"])
    @admin_only
    def api_award_badge():
        data = get_json_body()
        user_id = require_int(data, "userId")
        badge_id = require_int(data, "badgeId")

        user_badge = BadgeService.award_manual(user_id, badge_id, awarded_by_id=current_user.id)
        return api_response(
            {
                "userId": user_badge.user_id,
                "badgeId": user_badge.badge_id,
                "earnedDate": user_badge.earned_at.isoformat(),
            },
            message="Badge awarded",
            status=201,
        )
