from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from payout_service.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with the shared read helpers. Writes live on the
        subclasses, which decide whether they commit or only stage.

        **Parameters**

        * `model`: A SQLAlchemy model class
        """
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()
