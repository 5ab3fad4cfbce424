from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from construction_dashboard.database import models
from construction_dashboard.repositories.interfaces import IWorkRepository
from construction_dashboard.services.exceptions import PersistenceError

class SqlalchemyWorkRepository(IWorkRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, work_model: models.Work) -> models.Work:
        try:
            self.db.add(work_model)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to save work '{work_model.name}'.") from e
        self.db.refresh(work_model)
        return work_model

    def list_by_tenant(self, tenant_id: int) -> List[models.Work]:
        return self.db.query(models.Work).filter(
            models.Work.tenant_id == tenant_id
        ).order_by(models.Work.id.asc()).all()
