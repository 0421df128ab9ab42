# payout_service/crud/__init__.py

from .crud_order import order
from .crud_payout import payout
from .crud_payout_audit_log import payout_audit_log
from .crud_user import user, organizer_profile
