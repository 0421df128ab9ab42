# payout_service/crud/crud_user.py
from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from payout_service.crud.base import CRUDBase
from payout_service.models.user import User, OrganizerProfile


class CRUDUser(CRUDBase[User]):
    def get_admins(self, db: Session) -> List[User]:
        return db.query(self.model).filter(self.model.role == "ADMIN").all()


class CRUDOrganizerProfile(CRUDBase[OrganizerProfile]):
    def get_by_user(self, db: Session, *, user_id: str) -> Optional[OrganizerProfile]:
        return db.query(self.model).filter(self.model.user_id == user_id).first()

    def get_by_user_for_update(
        self, db: Session, *, user_id: str
    ) -> Optional[OrganizerProfile]:
        """Lock the organizer's profile row; serializes payout requests per organizer."""
        return (
            db.query(self.model)
            .filter(self.model.user_id == user_id)
            .with_for_update()
            .first()
        )

    def set_bank_details(
        self,
        db: Session,
        *,
        user_id: str,
        bank_account: str,
        bank_code: str,
        account_name: str,
    ) -> OrganizerProfile:
        """Store verified bank details, creating the profile if needed."""
        profile = self.get_by_user_for_update(db, user_id=user_id)
        if not profile:
            profile = self.model(user_id=user_id)
        profile.bank_account = bank_account
        profile.bank_code = bank_code
        profile.account_name = account_name
        profile.bank_verified_at = datetime.now(timezone.utc)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile


user = CRUDUser(User)
organizer_profile = CRUDOrganizerProfile(OrganizerProfile)
