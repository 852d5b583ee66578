from typing import Type, TypeVar
from pydantic import BaseModel
from sqlalchemy.orm import Session

ModelType = TypeVar('ModelType')


class BaseService:
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def create(self, db: Session, obj_in, **extra) -> ModelType:
        """
        Insert a row built from a schema (plus ``extra`` columns) or an ORM instance.

        Commits, so the returned instance carries its generated id.
        """
        db_obj = self.model(**obj_in.model_dump(), **extra) if isinstance(obj_in, BaseModel) else obj_in

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj
