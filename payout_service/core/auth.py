# payout_service/core/auth.py
"""
Explicit caller identity passed into every service operation.
"""
from dataclasses import dataclass
from typing import Optional

ADMIN_ROLE = "ADMIN"
ORGANIZER_SUB_ROLE = "ORGANIZER"


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role: str = "USER"
    sub_role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").upper() == ADMIN_ROLE

    @property
    def is_organizer(self) -> bool:
        return (self.sub_role or "").upper() == ORGANIZER_SUB_ROLE

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.user_id
