"""User permission override - explicit deviation from the role default."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserPermissionOverride:
    """Per-user grant (granted=True) or deny (granted=False) of one permission."""

    user_id: int
    permission_code: str
    granted: bool
    granted_at: datetime
    granted_by: int | None = None
