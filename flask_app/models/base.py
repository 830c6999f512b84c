# flask_app/models/base.py

from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

db = SQLAlchemy()


def utcnow():
    """Timezone-aware UTC now, used for column defaults."""
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base model with timestamps and guarded persistence helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """
        Create and commit a new record.

        Returns:
            tuple: (instance, None) on success, (None, error message) on failure.
        """
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.error(f"Integrity error creating {cls.__name__}: {str(e)}")
            return None, f"Duplicate or invalid data (unique constraint): {str(e.orig)}"
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database error creating {cls.__name__}: {str(e)}")
            return None, str(e)

    def safe_update(self, **kwargs):
        """
        Apply attribute changes and commit.

        Returns:
            tuple: (instance, None) on success, (None, error message) on failure.
        """
        try:
            for key, value in kwargs.items():
                setattr(self, key, value)
            db.session.commit()
            return self, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database error updating {type(self).__name__} {self.id}: {str(e)}")
            return None, str(e)
