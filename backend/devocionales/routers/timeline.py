from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from devocionales.core.settings import settings
from devocionales.db.session import get_db
from devocionales.db.store import Store
from devocionales.deps import get_current_profile
from devocionales.schemas.timeline import TimelineEventOut, TimelinePageOut
from devocionales.services.permissions import PermissionProfile
from devocionales.services.timeline import list_events, personalize_summary

router = APIRouter(prefix="/timeline", tags=["timeline"])


@router.get("", response_model=TimelinePageOut)
def community_timeline(
    action_type: list[str] | None = Query(default=None),
    entity_type: list[str] | None = Query(default=None),
    actor_id: int | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    limit: int = Query(default=50, ge=1),
    cursor: int | None = Query(default=None),
    db: Session = Depends(get_db),
    profile: PermissionProfile = Depends(get_current_profile),
):
    page = list_events(
        Store(db),
        profile,
        action_types=action_type,
        entity_types=entity_type,
        actor_id=actor_id,
        start_date=start_date,
        end_date=end_date,
        limit=min(limit, settings.timeline_page_max),
        cursor=cursor,
    )
    items: list[TimelineEventOut] = []
    for event in page.events:
        item = TimelineEventOut.model_validate(event)
        item.summary = personalize_summary(event.summary, event.actor_name, event.actor_id, profile.user_id)
        items.append(item)
    return TimelinePageOut(events=items, has_more=page.has_more, cursor=page.cursor)
