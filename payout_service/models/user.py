# payout_service/models/user.py
from sqlalchemy import Column, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from payout_service.db.base_class import Base
import uuid


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: f"usr_{uuid.uuid4().hex[:12]}")
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, server_default="USER")
    # Values: 'USER', 'ADMIN'
    sub_role = Column(String(20), nullable=True)
    # Values: 'ATTENDEE', 'ORGANIZER'
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    organizer_profile = relationship(
        "OrganizerProfile", back_populates="user", uselist=False
    )


class OrganizerProfile(Base):
    __tablename__ = "organizer_profiles"

    id = Column(String, primary_key=True, default=lambda: f"orp_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    organization_name = Column(String(255), nullable=True)

    # Payout destination, set through bank verification
    bank_account = Column(String(20), nullable=True)
    bank_code = Column(String(20), nullable=True)
    account_name = Column(String(255), nullable=True)
    bank_verified_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user = relationship("User", back_populates="organizer_profile")

    @property
    def has_bank_details(self) -> bool:
        return bool(self.bank_account and self.bank_code)
