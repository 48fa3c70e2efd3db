"""
Notification endpoints: list and mark as read.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_current_identity, get_db
from app.db.models import Identity
from app.schemas.common import envelope, pagination
from app.schemas.notification import NotificationOut
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    items, total, unread_count = notification_service.list_notifications(db, identity, unread_only, page, limit)
    return envelope(
        [NotificationOut.model_validate(n).dump() for n in items],
        pagination=pagination(page, limit, total),
        unreadCount=unread_count,
    )


@router.put("/read-all")
def mark_all_read(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, identity)
    return envelope({"updated": updated}, message="All notifications marked as read")


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    notification = notification_service.mark_read(db, identity, notification_id)
    return envelope(NotificationOut.model_validate(notification).dump(), message="Notification marked as read")
