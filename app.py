# app.py

import os

import jwt
from dotenv import load_dotenv
from flask import Flask, current_app, g
from flask_login import LoginManager
from sqlalchemy import event

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from flask_app.cli import register_cli  # noqa: E402
from flask_app.models import User, db  # noqa: E402
from flask_app.routes import init_routes  # noqa: E402
from flask_app.services.realtime import init_realtime  # noqa: E402
from flask_app.utils.errors import Unauthenticated, register_error_handlers  # noqa: E402
from flask_app.utils.logging_config import setup_logging  # noqa: E402
from flask_app.utils.tokens import bearer_token_from_header, decode_access_token  # noqa: E402

_CONFIGS = {
    "production": (ProductionConfig, ProductionMonitoringConfig),
    "testing": (TestingConfig, TestingMonitoringConfig),
    "development": (DevelopmentConfig, DevelopmentMonitoringConfig),
}

flask_env = os.environ.get("FLASK_ENV", "development")
if flask_env == "production":
    validate_and_exit(flask_env)

app = Flask(__name__)
for config_object in _CONFIGS.get(flask_env, _CONFIGS["development"]):
    app.config.from_object(config_object)

db.init_app(app)
login_manager = LoginManager()
login_manager.init_app(app)

setup_logging(app)
register_error_handlers(app)
init_realtime(app)
register_cli(app)


def _sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")
    if not app.config.get("TESTING", False):
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


with app.app_context():
    if db.engine.url.drivername.startswith("sqlite"):
        event.listen(db.engine, "connect", _sqlite_pragmas)
    if not app.config.get("TESTING", False):
        db.create_all()


@login_manager.request_loader
def load_user_from_request(req):
    """Authenticate ``Authorization: Bearer <jwt>``; inactive users are rejected"""
    token = bearer_token_from_header(req.headers.get("Authorization"))
    if token is None:
        return None
    try:
        claims = decode_access_token(token)
        user_id = int(claims["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError) as e:
        current_app.logger.debug(f"Rejected bearer token: {str(e)}")
        return None

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        current_app.logger.info(f"Bearer token for unknown or inactive user {user_id}")
        return None
    g.token_claims = claims
    return user


@login_manager.unauthorized_handler
def unauthorized():
    return Unauthenticated().to_response()


init_routes(app)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
