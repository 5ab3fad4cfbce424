from sqlalchemy import Column, Integer, String, Text, Date, Float
from sqlalchemy.orm import relationship, validates
from ..database import Base
from .status import ProjectStatus
from construction_dashboard.utils.color_bands import clamp_progress

class Project(Base):
    """
    하나의 건설 사업(프로젝트)을 나타냅니다.
    프로젝트는 여러 작업(Work)을 포함하며, 테넌트(회사) 단위로 격리됩니다.
    """
    __tablename__ = "projects"
    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default=ProjectStatus.PLANNING.value)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    budget = Column(Float)
    actual_cost = Column(Float)
    progress = Column(Integer, nullable=False, default=0)
    manager = Column(String, nullable=False)

    works = relationship("Work", back_populates="project", order_by="Work.id")

    @validates("progress")
    def _clamp_progress(self, key, value):
        return clamp_progress(value)

    @property
    def works_count(self) -> int:
        return len(self.works)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "budget": self.budget,
            "actual_cost": self.actual_cost,
            "progress": self.progress,
            "manager": self.manager,
            "works_count": self.works_count,
        }
