# flask_app/models/opportunity/__init__.py
"""
Opportunity and application models package.
"""

from .enums import APPLICATION_TRANSITIONS, ApplicationStatus, OpportunityStatus
from .models import VolunteerApplication, VolunteerOpportunity

__all__ = [
    # Models
    "VolunteerOpportunity",
    "VolunteerApplication",
    # Enums
    "OpportunityStatus",
    "ApplicationStatus",
    "APPLICATION_TRANSITIONS",
]
