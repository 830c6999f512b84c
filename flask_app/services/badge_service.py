# flask_app/services/badge_service.py
"""
Badge Service - badge catalog, automatic activity awards and per-user stats
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from config.monitoring import ServiceMonitoring
from flask_app.models import (
    ApplicationStatus,
    Badge,
    BadgeType,
    NotificationPriority,
    NotificationType,
    User,
    UserBadge,
    VolunteerApplication,
    db,
)
from flask_app.models.base import utcnow
from flask_app.services.notification_service import NotificationService
from flask_app.utils.errors import Conflict, NotFound

DEFAULT_BADGES = [
    {
        "name": "First Volunteer",
        "description": "Completed your first volunteer activity",
        "type": BadgeType.ACTIVITY,
        "required_activity_count": 1,
        "color": "#4CAF50",
    },
    {
        "name": "Committed Volunteer",
        "description": "Completed 5 volunteer activities",
        "type": BadgeType.ACTIVITY,
        "required_activity_count": 5,
        "color": "#2196F3",
    },
    {
        "name": "Dedicated",
        "description": "Completed 10 volunteer activities",
        "type": BadgeType.ACTIVITY,
        "required_activity_count": 10,
        "color": "#9C27B0",
    },
    {
        "name": "Veteran",
        "description": "One year of volunteering on the platform",
        "type": BadgeType.TIME,
        "required_activity_count": 0,
        "color": "#FF9800",
    },
    {
        "name": "Community Leader",
        "description": "Led a volunteer team",
        "type": BadgeType.LEADERSHIP,
        "required_activity_count": 0,
        "color": "#F44336",
    },
    {
        "name": "Ambassador",
        "description": "Recognized for promoting volunteering",
        "type": BadgeType.SPECIAL,
        "required_activity_count": 0,
        "color": "#FFD700",
    },
]


@dataclass
class BadgeStats:
    total_earned: int
    total_available: int
    activity_badges: int
    time_badges: int
    leadership_badges: int
    special_badges: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEarned": self.total_earned,
            "totalAvailable": self.total_available,
            "activityBadges": self.activity_badges,
            "timeBadges": self.time_badges,
            "leadershipBadges": self.leadership_badges,
            "specialBadges": self.special_badges,
        }


class BadgeService:
    """Badge catalog queries and award rules"""

    @classmethod
    def list_catalog(cls, include_inactive: bool = False) -> List[Badge]:
        query = Badge.query
        if not include_inactive:
            query = query.filter(Badge.is_active.is_(True))
        return query.order_by(Badge.type, Badge.required_activity_count, Badge.name).all()

    @classmethod
    def completed_activity_count(cls, user_id: int) -> int:
        return VolunteerApplication.query.filter_by(user_id=user_id, status=ApplicationStatus.COMPLETED).count()

    @classmethod
    def _earned_badge_ids(cls, user_id: int) -> set:
        rows = db.session.query(UserBadge.badge_id).filter(UserBadge.user_id == user_id).all()
        return {badge_id for (badge_id,) in rows}

    @classmethod
    def _award(cls, user_id: int, badge: Badge, awarded_by_id: Optional[int] = None) -> Optional[UserBadge]:
        """
        Insert one UserBadge inside a savepoint and notify the user.

        Returns None when the unique (user, badge) constraint reports the badge
        was already awarded, e.g. by a concurrent evaluation.
        """
        try:
            with db.session.begin_nested():
                user_badge = UserBadge(
                    user_id=user_id,
                    badge_id=badge.id,
                    earned_at=utcnow(),
                    awarded_by_id=awarded_by_id,
                )
                db.session.add(user_badge)
                db.session.flush()
        except IntegrityError:
            current_app.logger.info(f"Badge {badge.id} already held by user {user_id}; not awarded again")
            return None

        NotificationService.create(
            recipient_id=user_id,
            title="New badge earned",
            message=f"Congratulations! You earned the '{badge.name}' badge.",
            type=NotificationType.BADGE_EARNED,
            priority=NotificationPriority.HIGH,
            action_url="/badges",
            commit=False,
        )

        source = "manual" if awarded_by_id else "automatic"
        ServiceMonitoring.BADGES_AWARDED.labels(source=source).inc()
        current_app.logger.info(f"Badge '{badge.name}' awarded to user {user_id} ({source})")
        return user_badge

    @classmethod
    def evaluate_activity_badges(cls, user_id: int) -> List[UserBadge]:
        """
        Award every active activity badge whose threshold the user's completed
        activity count meets and that the user does not hold yet.

        Does not commit. Re-running without new completions awards nothing.
        """
        completed = cls.completed_activity_count(user_id)
        if completed == 0:
            return []

        candidates = (
            Badge.query.filter(
                Badge.is_active.is_(True),
                Badge.type == BadgeType.ACTIVITY,
                Badge.required_activity_count <= completed,
            )
            .order_by(Badge.required_activity_count, Badge.id)
            .all()
        )
        earned = cls._earned_badge_ids(user_id)

        awarded = []
        for badge in candidates:
            if badge.id in earned:
                continue
            user_badge = cls._award(user_id, badge)
            if user_badge is not None:
                awarded.append(user_badge)

        current_app.logger.debug(
            f"Badge evaluation for user {user_id}: {completed} completed, {len(awarded)} newly awarded"
        )
        return awarded

    @classmethod
    def check_automatic(cls, user_id: int) -> List[UserBadge]:
        """Re-run the activity rules for a user and commit any new awards"""
        awarded = cls.evaluate_activity_badges(user_id)
        db.session.commit()
        return awarded

    @classmethod
    def award_manual(cls, user_id: int, badge_id: int, awarded_by_id: int) -> UserBadge:
        """Award any active badge by hand (administrators)"""
        if db.session.get(User, user_id) is None:
            raise NotFound("User not found")
        badge = db.session.get(Badge, badge_id)
        if badge is None:
            raise NotFound("Badge not found")
        if not badge.is_active:
            raise Conflict("Badge is not active")
        if badge.id in cls._earned_badge_ids(user_id):
            raise Conflict("User already has this badge")

        user_badge = cls._award(user_id, badge, awarded_by_id=awarded_by_id)
        if user_badge is None:
            raise Conflict("User already has this badge")
        db.session.commit()
        return user_badge

    @classmethod
    def user_badges(cls, user_id: int) -> List[Dict[str, Any]]:
        """Active catalog plus any retired badges the user holds, each flagged earned/not"""
        earned = {ub.badge_id: ub for ub in UserBadge.query.filter_by(user_id=user_id).all()}
        badges = {b.id: b for b in cls.list_catalog()}
        for badge_id, user_badge in earned.items():
            badges.setdefault(badge_id, user_badge.badge)

        result = []
        for badge in sorted(badges.values(), key=lambda b: (b.type.value, b.required_activity_count, b.name)):
            user_badge = earned.get(badge.id)
            entry = badge.to_dict()
            entry["isEarned"] = user_badge is not None
            entry["earnedDate"] = user_badge.earned_at.isoformat() if user_badge else None
            result.append(entry)
        return result

    @classmethod
    def stats(cls, user_id: int) -> BadgeStats:
        rows = (
            db.session.query(Badge.type, func.count(UserBadge.id))
            .join(UserBadge, UserBadge.badge_id == Badge.id)
            .filter(UserBadge.user_id == user_id)
            .group_by(Badge.type)
            .all()
        )
        by_type = {badge_type: count for badge_type, count in rows}
        return BadgeStats(
            total_earned=sum(by_type.values()),
            total_available=Badge.query.filter(Badge.is_active.is_(True)).count(),
            activity_badges=by_type.get(BadgeType.ACTIVITY, 0),
            time_badges=by_type.get(BadgeType.TIME, 0),
            leadership_badges=by_type.get(BadgeType.LEADERSHIP, 0),
            special_badges=by_type.get(BadgeType.SPECIAL, 0),
        )

    @classmethod
    def seed_default_badges(cls) -> int:
        """Insert missing default catalog entries by name; returns how many were created"""
        created = 0
        for definition in DEFAULT_BADGES:
            if Badge.find_by_name(definition["name"]) is not None:
                continue
            db.session.add(Badge(is_active=True, **definition))
            created += 1
        db.session.commit()
        return created
