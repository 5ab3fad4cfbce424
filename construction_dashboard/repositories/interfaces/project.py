from abc import ABC, abstractmethod
from typing import List, Optional
from construction_dashboard.database import models

class IProjectRepository(ABC):
    @abstractmethod
    def create(self, project_model: models.Project) -> models.Project:
        """
        새로운 프로젝트를 저장하고, 저장소가 발급한 ID가 채워진 모델을 반환합니다.

        Raises:
            PersistenceError: 저장에 실패했을 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, project_id: int, tenant_id: int) -> Optional[models.Project]:
        """테넌트 범위 안에서 고유 ID로 특정 프로젝트를 조회합니다."""
        pass

    @abstractmethod
    def list_by_tenant(self, tenant_id: int) -> List[models.Project]:
        """특정 테넌트의 모든 프로젝트를 생성 순서(ID 오름차순)대로 조회합니다."""
        pass
