"""
Analytics recorder. Events are appended inside the caller's transaction
and read back only through aggregate queries.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.logging_config import sanitize_log_data
from app.core.rate_limit import get_client_ip
from app.db.models.analytics_event import AnalyticsEvent

logger = logging.getLogger(__name__)


def record_event(
    db: Session,
    entity_type: str,
    entity_id: int,
    event_type: str,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AnalyticsEvent:
    event = AnalyticsEvent(
        entity_type=entity_type,
        entity_id=entity_id,
        event_type=event_type,
        event_metadata=metadata or {},
        user_agent=request.headers.get("user-agent") if request is not None else None,
        ip_address=get_client_ip(request) if request is not None else None,
    )
    db.add(event)
    logger.debug(f"Analytics event: {entity_type}:{entity_id} {event_type} {sanitize_log_data(event.event_metadata)}")
    return event
