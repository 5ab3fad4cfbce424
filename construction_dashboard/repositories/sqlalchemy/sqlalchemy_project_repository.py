from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from construction_dashboard.database import models
from construction_dashboard.repositories.interfaces import IProjectRepository
from construction_dashboard.services.exceptions import PersistenceError

class SqlalchemyProjectRepository(IProjectRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, project_model: models.Project) -> models.Project:
        try:
            self.db.add(project_model)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to save project '{project_model.name}'.") from e
        self.db.refresh(project_model)
        return project_model

    def find_by_id(self, project_id: int, tenant_id: int) -> Optional[models.Project]:
        return self.db.query(models.Project).filter(
            models.Project.id == project_id,
            models.Project.tenant_id == tenant_id
        ).first()

    def list_by_tenant(self, tenant_id: int) -> List[models.Project]:
        return self.db.query(models.Project).filter(
            models.Project.tenant_id == tenant_id
        ).order_by(models.Project.id.asc()).all()
