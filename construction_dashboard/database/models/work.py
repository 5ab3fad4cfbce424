from sqlalchemy import Column, Integer, String, Text, Date, Float, ForeignKey
from sqlalchemy.orm import relationship, validates
from ..database import Base
from .status import WorkStatus
from construction_dashboard.utils.color_bands import clamp_progress

class Work(Base):
    """
    프로젝트에 속한 개별 작업 또는 공정(obra)을 나타냅니다.
    project_id로 상위 프로젝트를 참조하며, 품질 점수(0~100)는 선택 항목입니다.
    """
    __tablename__ = "works"
    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String, nullable=False)
    status = Column(String, nullable=False, default=WorkStatus.NOT_STARTED.value)
    progress = Column(Integer, nullable=False, default=0)
    planned_cost = Column(Float)
    actual_cost = Column(Float)
    start_date = Column(Date)
    end_date = Column(Date)
    assignee = Column(String, nullable=False)
    quality_score = Column(Integer)
    last_update = Column(Date, nullable=False)

    project = relationship("Project", back_populates="works", lazy="joined")

    @validates("progress")
    def _clamp_progress(self, key, value):
        return clamp_progress(value)

    @property
    def project_name(self) -> str:
        return self.project.name if self.project is not None else ""

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "status": self.status,
            "progress": self.progress,
            "planned_cost": self.planned_cost,
            "actual_cost": self.actual_cost,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "assignee": self.assignee,
            "quality_score": self.quality_score,
            "last_update": self.last_update.isoformat() if self.last_update else None,
        }
