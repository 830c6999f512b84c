# conftest.py

import os

import pytest
from flask import g
from werkzeug.security import generate_password_hash

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from flask_app.models import (  # noqa: E402
    Badge,
    BadgeType,
    OpportunityStatus,
    Organization,
    User,
    UserRole,
    UserStatus,
    VolunteerOpportunity,
    db,
)
from flask_app.utils.tokens import create_access_token  # noqa: E402


@flask_app.before_request
def _reset_cached_identity():
    """Test requests share the test's app context, so drop identity cached on g"""
    g.pop("_login_user", None)
    g.pop("token_claims", None)


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application with a fresh schema"""
    flask_app.config.update(
        {
            "TESTING": True,
            "MONITORING_ENABLED": False,
            "ENABLE_FILE_LOGGING": False,
            "ENABLE_CONSOLE_LOGGING": False,
            "LOG_LEVEL": "DEBUG",
            "REALTIME_ENABLED": True,
        }
    )

    from flask_app.utils.logging_config import setup_logging

    setup_logging(flask_app)

    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        flask_app.extensions["realtime"].clear()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def publisher(app):
    """In-memory real-time publisher; events land in ``publisher.events``"""
    return app.extensions["realtime"]


def _make_user(email, role, first_name, last_name, status=UserStatus.ACTIVE):
    user = User(
        email=email,
        password_hash=generate_password_hash("testpass123"),
        first_name=first_name,
        last_name=last_name,
        role=role,
        status=status,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def volunteer():
    """Active volunteer account"""
    return _make_user("volunteer@example.com", UserRole.VOLUNTEER, "Vera", "Volunteer")


@pytest.fixture
def other_volunteer():
    """Second active volunteer account"""
    return _make_user("second.volunteer@example.com", UserRole.VOLUNTEER, "Sam", "Second")


@pytest.fixture
def org_user():
    """Account that owns an organization profile"""
    return _make_user("org@example.com", UserRole.ORGANIZATION, "Olga", "Owner")


@pytest.fixture
def admin_user():
    """Administrator account"""
    return _make_user("admin@example.com", UserRole.ADMINISTRATOR, "Ada", "Admin")


@pytest.fixture
def inactive_user():
    """Deactivated volunteer account"""
    return _make_user("inactive@example.com", UserRole.VOLUNTEER, "Ivan", "Inactive", status=UserStatus.INACTIVE)


@pytest.fixture
def organization(org_user):
    """Organization profile owned by org_user"""
    org = Organization(user_id=org_user.id, name="Helping Hands", description="Community support")
    db.session.add(org)
    db.session.commit()
    return org


@pytest.fixture
def other_organization():
    """Organization owned by a different account"""
    owner = _make_user("other.org@example.com", UserRole.ORGANIZATION, "Otto", "Other")
    org = Organization(user_id=owner.id, name="Green Streets")
    db.session.add(org)
    db.session.commit()
    return org


def _make_opportunity(organization, title, volunteers_required=5, status=OpportunityStatus.ACTIVE):
    opportunity = VolunteerOpportunity(
        organization_id=organization.id,
        title=title,
        description=f"{title} description",
        volunteers_required=volunteers_required,
        volunteers_enrolled=0,
        status=status,
    )
    db.session.add(opportunity)
    db.session.commit()
    return opportunity


@pytest.fixture
def opportunity(organization):
    """Active opportunity with room for five volunteers"""
    return _make_opportunity(organization, "Beach Cleanup")


@pytest.fixture
def make_opportunity(organization):
    """Factory for additional opportunities of the default organization"""

    def factory(title="Extra Opportunity", volunteers_required=5, status=OpportunityStatus.ACTIVE, org=None):
        return _make_opportunity(org or organization, title, volunteers_required, status)

    return factory


@pytest.fixture
def badge_catalog():
    """Activity badges at thresholds 1, 3 and 10 plus one non-activity badge"""
    badges = [
        Badge(name="First Volunteer", type=BadgeType.ACTIVITY, required_activity_count=1, is_active=True),
        Badge(name="Three Timer", type=BadgeType.ACTIVITY, required_activity_count=3, is_active=True),
        Badge(name="Dedicated", type=BadgeType.ACTIVITY, required_activity_count=10, is_active=True),
        Badge(name="Community Leader", type=BadgeType.LEADERSHIP, required_activity_count=0, is_active=True),
    ]
    db.session.add_all(badges)
    db.session.commit()
    return {badge.name: badge for badge in badges}


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user"""

    def factory(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return factory
