from devocionales.models.base import Base
from devocionales.models.community import Community
from devocionales.models.user import ADMIN_ROLES, Role, User
from devocionales.models.barrio import Barrio
from devocionales.models.nucleo import Nucleo
from devocionales.models.family import Family
from devocionales.models.member import Member
from devocionales.models.visit import Visit, VisitStatus, VisitType
from devocionales.models.goal import Goal
from devocionales.models.timeline_event import ActionType, EntityType, TimelineEvent

__all__ = [
    "Base",
    "Community",
    "Role",
    "ADMIN_ROLES",
    "User",
    "Barrio",
    "Nucleo",
    "Family",
    "Member",
    "Visit",
    "VisitStatus",
    "VisitType",
    "Goal",
    "TimelineEvent",
    "ActionType",
    "EntityType",
]
