# payout_service/models/__init__.py
# Import all models so SQLAlchemy can resolve relationships by name.

from payout_service.db.base_class import Base
from payout_service.models.user import User, OrganizerProfile
from payout_service.models.event import Event
from payout_service.models.order import Order
from payout_service.models.payout import Payout, PayoutAuditLog
from payout_service.models.notification import Notification
