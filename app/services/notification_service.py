"""
Notification log.

Rows are appended inside the caller's transaction. When FastAPI background
tasks are passed in, a best-effort email copy is scheduled to run after the
response has been sent.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.models.identity import Identity
from app.db.models.notification import Notification
from app.services.notifier import email_enabled, send_email

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    identity_id: int,
    type: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Notification:
    notification = Notification(
        identity_id=identity_id,
        type=type,
        title=title,
        message=message,
        data=data or {},
    )
    db.add(notification)

    if background_tasks is not None and email_enabled():
        # Resolve the address now; the session is closed by the time the task runs
        identity = db.get(Identity, identity_id)
        if identity is not None:
            background_tasks.add_task(send_email, identity.email, title, message)

    logger.info(f"Notification queued: identity_id={identity_id}, type={type}")
    return notification


def list_notifications(
    db: Session, identity: Identity, unread_only: bool, page: int, limit: int
) -> Tuple[list, int, int]:
    """Returns (items, total, unread_count)."""
    query = db.query(Notification).filter(Notification.identity_id == identity.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    total = query.count()
    items = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    unread_count = (
        db.query(Notification)
        .filter(Notification.identity_id == identity.id, Notification.is_read.is_(False))
        .count()
    )
    return items, total, unread_count


def mark_read(db: Session, identity: Identity, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.identity_id == identity.id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, identity: Identity) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.identity_id == identity.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
