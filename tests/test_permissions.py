from datetime import datetime, timedelta, timezone

import jwt
import pytest

from flask_app.models import UserRole
from flask_app.utils.errors import Forbidden, Unauthenticated
from flask_app.utils.permissions import (
    admin_only,
    organization_only,
    organization_or_admin,
    role_required,
    volunteer_only,
    volunteer_or_admin,
)


def _token(app, user_id, **claims):
    now = datetime.now(timezone.utc)
    payload = {"sub": str(user_id), "iat": now, "exp": now + timedelta(minutes=5)}
    payload.update(claims)
    return jwt.encode(payload, app.config["JWT_SECRET_KEY"], algorithm=app.config["JWT_ALGORITHM"])


def _call(app, view, headers=None):
    """Invoke a decorated view inside a fresh request context"""
    with app.app_context():
        with app.test_request_context("/role-check", headers=headers or {}):
            return view()


@admin_only
def _admin_view():
    return "admin ok"


@volunteer_or_admin
def _volunteer_or_admin_view():
    return "volunteer-or-admin ok"


class TestRoleRequired:
    """Test the role allow-list filter"""

    def test_unauthenticated_is_rejected(self, app):
        """Test no credential raises Unauthenticated before the handler runs"""
        with pytest.raises(Unauthenticated):
            _call(app, _admin_view)

    def test_allowed_role_passes(self, app, admin_user, auth_headers):
        assert _call(app, _admin_view, auth_headers(admin_user)) == "admin ok"

    def test_disallowed_role_is_forbidden(self, app, volunteer, auth_headers):
        with pytest.raises(Forbidden):
            _call(app, _admin_view, auth_headers(volunteer))

    def test_missing_role_claim_is_forbidden(self, app, admin_user):
        """Test an authenticated token without a role claim fails closed"""
        headers = {"Authorization": f"Bearer {_token(app, admin_user.id)}"}
        with pytest.raises(Forbidden):
            _call(app, _admin_view, headers)

    def test_unparseable_role_claim_is_forbidden(self, app, admin_user):
        headers = {"Authorization": f"Bearer {_token(app, admin_user.id, role='superuser')}"}
        with pytest.raises(Forbidden):
            _call(app, _admin_view, headers)

    def test_non_ascii_digit_role_claim_is_forbidden(self, app, admin_user):
        """Test a Unicode digit role claim is denied rather than erroring"""
        headers = {"Authorization": f"Bearer {_token(app, admin_user.id, role='²')}"}
        with pytest.raises(Forbidden):
            _call(app, _admin_view, headers)

    def test_role_claim_by_name_is_accepted(self, app, admin_user):
        headers = {"Authorization": f"Bearer {_token(app, admin_user.id, role='Administrator')}"}
        assert _call(app, _admin_view, headers) == "admin ok"

    def test_role_claim_as_numeric_string_is_accepted(self, app, volunteer):
        headers = {"Authorization": f"Bearer {_token(app, volunteer.id, role='1')}"}
        assert _call(app, _volunteer_or_admin_view, headers) == "volunteer-or-admin ok"

    def test_claim_decides_not_stored_role(self, app, volunteer):
        """Test the filter checks the token's role claim"""
        headers = {"Authorization": f"Bearer {_token(app, volunteer.id, role=3)}"}
        assert _call(app, _admin_view, headers) == "admin ok"

    def test_expired_token_is_unauthenticated(self, app, admin_user):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": str(admin_user.id), "role": 3, "iat": past, "exp": past + timedelta(minutes=5)},
            app.config["JWT_SECRET_KEY"],
            algorithm=app.config["JWT_ALGORITHM"],
        )
        with pytest.raises(Unauthenticated):
            _call(app, _admin_view, {"Authorization": f"Bearer {token}"})

    def test_wrong_signature_is_unauthenticated(self, app, admin_user):
        token = jwt.encode(
            {"sub": str(admin_user.id), "role": 3, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            "another-secret-key-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(Unauthenticated):
            _call(app, _admin_view, {"Authorization": f"Bearer {token}"})

    def test_inactive_user_is_unauthenticated(self, app, inactive_user, auth_headers):
        with pytest.raises(Unauthenticated):
            _call(app, _volunteer_or_admin_view, auth_headers(inactive_user))

    def test_non_bearer_scheme_is_unauthenticated(self, app, admin_user, auth_headers):
        token = auth_headers(admin_user)["Authorization"].split(" ", 1)[1]
        with pytest.raises(Unauthenticated):
            _call(app, _admin_view, {"Authorization": f"Basic {token}"})

    def test_handler_not_invoked_on_denial(self, app, volunteer, auth_headers):
        calls = []

        @role_required(UserRole.ORGANIZATION)
        def view():
            calls.append(1)
            return "ok"

        with pytest.raises(Forbidden):
            _call(app, view, auth_headers(volunteer))
        assert calls == []


class TestPresets:
    """Test the named allow-lists"""

    @pytest.mark.parametrize(
        "preset,roles",
        [
            (volunteer_only, {UserRole.VOLUNTEER}),
            (organization_only, {UserRole.ORGANIZATION}),
            (admin_only, {UserRole.ADMINISTRATOR}),
            (volunteer_or_admin, {UserRole.VOLUNTEER, UserRole.ADMINISTRATOR}),
            (organization_or_admin, {UserRole.ORGANIZATION, UserRole.ADMINISTRATOR}),
        ],
    )
    def test_preset_allow_lists(self, preset, roles):
        view = preset(lambda: "ok")
        assert view.allowed_roles == frozenset(roles)
