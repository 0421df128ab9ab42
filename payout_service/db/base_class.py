# payout_service/db/base_class.py

from sqlalchemy.orm import declarative_base

# All SQLAlchemy models in the service inherit from this class.
Base = declarative_base()
