# talleres_api/crud/base.py
from typing import TypeVar, Generic, Type, Any, Optional, Dict, Union
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session
from talleres_api.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchema = TypeVar("CreateSchema", bound=BaseModel)
UpdateSchema = TypeVar("UpdateSchema", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchema, UpdateSchema]):
    """
    Operaciones comunes por modelo.

    Con la sesión por request cada escritura hace COMMIT. Dentro de
    ``Database.run_in_transaction`` se usa ``commit=False``: solo flush, y el
    COMMIT/ROLLBACK lo decide la transacción.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.get(self.model, id)

    def get_for_update(self, db: Session, id: Any) -> Optional[ModelType]:
        """Lee la fila y la bloquea hasta el fin de la transacción."""
        return db.execute(
            select(self.model).where(self.model.id == id).with_for_update()
        ).scalar_one_or_none()

    def _persist(self, db: Session, obj: ModelType, commit: bool) -> ModelType:
        db.add(obj)
        if commit:
            db.commit(); db.refresh(obj)
        else:
            db.flush()
        return obj

    def create(
        self, db: Session, obj_in: CreateSchema, extra: Dict[str, Any] | None = None, *, commit: bool = True
    ) -> ModelType:
        data = obj_in.model_dump()
        if extra: data.update(extra)
        return self._persist(db, self.model(**data), commit)

    def update(
        self, db: Session, db_obj: ModelType, obj_in: Union[UpdateSchema, Dict[str, Any]], *, commit: bool = True
    ) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for f, v in data.items(): setattr(db_obj, f, v)
        return self._persist(db, db_obj, commit)

    def remove(self, db: Session, id: Any) -> Optional[ModelType]:
        obj = self.get(db, id)
        if obj is None:
            return None
        db.delete(obj); db.commit()
        return obj
