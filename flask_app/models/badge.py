# flask_app/models/badge.py

from flask import current_app
from sqlalchemy import Enum
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db, utcnow
from .enums import BadgeType


class Badge(BaseModel):
    """Badge catalog entry"""

    __tablename__ = "badges"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(
        Enum(BadgeType, name="badge_type_enum"),
        default=BadgeType.ACTIVITY,
        nullable=False,
        index=True,
    )
    required_activity_count = db.Column(db.Integer, default=0, nullable=False)
    icon_url = db.Column(db.String(500), nullable=True)
    color = db.Column(db.String(20), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    # Relationships
    awards = db.relationship("UserBadge", back_populates="badge")

    def __repr__(self):
        return f"<Badge {self.name} ({self.type.value})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "requiredActivityCount": self.required_activity_count,
            "iconUrl": self.icon_url,
            "color": self.color,
            "isActive": self.is_active,
        }

    @staticmethod
    def find_by_name(name):
        """Find badge by name with error handling"""
        try:
            return Badge.query.filter_by(name=name).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding badge by name {name}: {str(e)}")
            return None


class UserBadge(BaseModel):
    """A badge earned by a user; at most one row per (user, badge)"""

    __tablename__ = "user_badges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    badge_id = db.Column(db.Integer, db.ForeignKey("badges.id"), nullable=False)
    earned_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    awarded_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Relationships
    user = db.relationship("User", foreign_keys=[user_id])
    badge = db.relationship("Badge", back_populates="awards")
    awarded_by = db.relationship("User", foreign_keys=[awarded_by_id])

    __table_args__ = (db.UniqueConstraint("user_id", "badge_id", name="_user_badge_uc"),)

    def __repr__(self):
        return f"<UserBadge user={self.user_id} badge={self.badge_id}>"
