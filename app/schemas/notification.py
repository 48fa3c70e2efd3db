from datetime import datetime
from typing import Any, Dict, Optional

from app.schemas.common import CamelModel


class NotificationOut(CamelModel):
    id: int
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime
