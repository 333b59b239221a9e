from typing import Any, Generic, Optional, Type, TypeVar
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.database.session import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base class for CRUD operations.

    Models carry a public ``id`` (UUID string) and an internal ``ref_id``.
    Lookups coming from the API always use ``id``; ``ref_id`` is only used
    to follow foreign keys. Nothing here commits: the calling service owns
    the transaction.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Get an object by its public ID
        """
        return db.query(self.model).filter(self.model.id == id).first()

    def get_by_ref(self, db: Session, ref_id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.ref_id == ref_id).first()

    def add(self, db: Session, db_obj: ModelType) -> ModelType:
        """
        Stage a new object and flush so its generated keys are available
        """
        db.add(db_obj)
        db.flush()
        return db_obj

    def remove(self, db: Session, *, db_obj: ModelType) -> None:
        db.delete(db_obj)
        db.flush()
